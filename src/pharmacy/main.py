from __future__ import annotations

import sys

import uvicorn

from pharmacy.adapters.inbound.cli import PharmacyMenu
from pharmacy.bootstrap import build_usecases
from pharmacy.config import load_settings
from pharmacy.logging_config import setup_logging


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    if argv:
        print("usage: pharmacy   (interactive menu, configured through PHARMACY_* variables)")
        return 2

    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    return PharmacyMenu(build_usecases(settings)).run()


def serve() -> None:
    settings = load_settings()
    uvicorn.run(
        "pharmacy.asgi:create_asgi_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
    )


if __name__ == "__main__":
    raise SystemExit(main())
