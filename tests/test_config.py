from __future__ import annotations

import pytest

from pharmacy.adapters.outbound.in_memory.unit_of_work import InMemoryUnitOfWork
from pharmacy.adapters.outbound.sql.unit_of_work import SqlUnitOfWork
from pharmacy.bootstrap import build_unit_of_work
from pharmacy.config import Settings, load_settings


def test_defaults_when_nothing_is_set():
    settings = load_settings({})

    assert settings == Settings()
    assert settings.storage == "sql"
    assert settings.currency == "EUR"


def test_values_are_read_and_normalized():
    settings = load_settings(
        {
            "PHARMACY_DATABASE_URL": "postgresql+psycopg://pharmacy@db/pharmacy",
            "PHARMACY_STORAGE": " Memory ",
            "PHARMACY_CURRENCY": "usd",
            "PHARMACY_LOG_LEVEL": "debug",
            "PHARMACY_LOG_FILE": "pharmacy.log",
            "PHARMACY_API_HOST": "127.0.0.1",
            "PHARMACY_API_PORT": "9000",
            "PHARMACY_SQL_ECHO": "yes",
        }
    )

    assert settings.database_url == "postgresql+psycopg://pharmacy@db/pharmacy"
    assert settings.storage == "memory"
    assert settings.currency == "USD"
    assert settings.log_level == "DEBUG"
    assert settings.log_file == "pharmacy.log"
    assert (settings.api_host, settings.api_port) == ("127.0.0.1", 9000)
    assert settings.sql_echo is True


@pytest.mark.parametrize(
    "env",
    [
        {"PHARMACY_STORAGE": "redis"},
        {"PHARMACY_LOG_LEVEL": "LOUD"},
        {"PHARMACY_CURRENCY": "EURO"},
        {"PHARMACY_API_PORT": "eighty"},
    ],
)
def test_invalid_values_are_rejected(env):
    with pytest.raises(ValueError):
        load_settings(env)


def test_memory_storage_builds_in_memory_unit_of_work():
    uow = build_unit_of_work(Settings(storage="memory"))

    assert isinstance(uow, InMemoryUnitOfWork)


def test_sql_storage_creates_the_schema(tmp_path):
    uow = build_unit_of_work(Settings(database_url=f"sqlite:///{tmp_path / 'p.db'}"))

    assert isinstance(uow, SqlUnitOfWork)
    with uow.begin() as tx:
        assert tx.medicines.list_all().unwrap() == ()
