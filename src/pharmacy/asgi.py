from __future__ import annotations

from fastapi import FastAPI

from pharmacy.adapters.inbound.web.fastapi_app import create_app
from pharmacy.bootstrap import build_usecases
from pharmacy.config import load_settings
from pharmacy.logging_config import setup_logging


def create_asgi_app() -> FastAPI:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    return create_app(build_usecases(settings))
