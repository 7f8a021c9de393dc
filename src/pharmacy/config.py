from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

STORAGE_MODES = ("sql", "memory")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///pharmacy.db"
    storage: str = "sql"
    currency: str = "EUR"
    log_level: str = "INFO"
    log_file: str | None = None
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    sql_echo: bool = False


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Read settings from PHARMACY_* environment variables.

    A .env file in the working directory is loaded first when ``environ``
    is not given; variables already set in the environment win.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    defaults = Settings()
    storage = environ.get("PHARMACY_STORAGE", defaults.storage).strip().lower()
    if storage not in STORAGE_MODES:
        raise ValueError(f"PHARMACY_STORAGE must be one of {STORAGE_MODES}, got {storage!r}")

    log_level = environ.get("PHARMACY_LOG_LEVEL", defaults.log_level).strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"PHARMACY_LOG_LEVEL must be one of {LOG_LEVELS}, got {log_level!r}")

    currency = environ.get("PHARMACY_CURRENCY", defaults.currency).strip().upper()
    if len(currency) != 3 or not currency.isalpha():
        raise ValueError(f"PHARMACY_CURRENCY must be a 3-letter code, got {currency!r}")

    raw_port = environ.get("PHARMACY_API_PORT", str(defaults.api_port))
    try:
        api_port = int(raw_port)
    except ValueError:
        raise ValueError(f"PHARMACY_API_PORT must be an integer, got {raw_port!r}") from None

    return Settings(
        database_url=environ.get("PHARMACY_DATABASE_URL", defaults.database_url),
        storage=storage,
        currency=currency,
        log_level=log_level,
        log_file=environ.get("PHARMACY_LOG_FILE") or None,
        api_host=environ.get("PHARMACY_API_HOST", defaults.api_host),
        api_port=api_port,
        sql_echo=_flag(environ.get("PHARMACY_SQL_ECHO", "false")),
    )


def _flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}
