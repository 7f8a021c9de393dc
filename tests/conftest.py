from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List

import pytest
from returns.result import Failure, Result, Success

from pharmacy.adapters.outbound.in_memory.store import InMemoryStore
from pharmacy.adapters.outbound.in_memory.unit_of_work import InMemoryUnitOfWork
from pharmacy.adapters.outbound.sql.engine import create_pharmacy_engine
from pharmacy.adapters.outbound.sql.schema import create_schema
from pharmacy.adapters.outbound.sql.unit_of_work import SqlUnitOfWork
from pharmacy.bootstrap import UseCases, build_usecases
from pharmacy.config import Settings
from pharmacy.core.domain.model.catalog import Address, Client, Medicine
from pharmacy.core.domain.model.errors import PharmacyError, StorageFailure
from pharmacy.core.domain.model.order import ClientId, MedicineId, Money
from pharmacy.core.ports.outbound.events import OrderPlaced
from pharmacy.core.ports.outbound.unit_of_work import UnitOfWork

ORDER_DAY = date(2026, 3, 14)


@dataclass
class RecordingPublisher:
    events: List[OrderPlaced] = field(default_factory=list)
    fail: bool = False

    def publish(self, event: OrderPlaced) -> Result[None, PharmacyError]:
        if self.fail:
            return Failure(StorageFailure("broker unreachable"))
        self.events.append(event)
        return Success(None)


@dataclass(frozen=True)
class Seeded:
    client_id: int
    medicine_a: int  # price 2.00, stock 10
    medicine_b: int  # price 1.50, stock 3


def make_sql_uow(tmp_path) -> SqlUnitOfWork:
    engine = create_pharmacy_engine(f"sqlite:///{tmp_path / 'pharmacy.db'}")
    create_schema(engine)
    return SqlUnitOfWork(engine)


@pytest.fixture(params=["sql", "memory"])
def uow(request, tmp_path) -> UnitOfWork:
    if request.param == "sql":
        return make_sql_uow(tmp_path)
    return InMemoryUnitOfWork(InMemoryStore())


@pytest.fixture
def memory_uow() -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(InMemoryStore())


@pytest.fixture
def sql_uow(tmp_path) -> SqlUnitOfWork:
    return make_sql_uow(tmp_path)


def seed(uow: UnitOfWork) -> Seeded:
    with uow.begin() as tx:
        client_id = tx.clients.add(
            Client(
                ClientId(0),
                "Ona",
                "Petraitytė",
                Address("Lithuania", "Vilnius", "Gedimino pr. 1", "01103"),
            )
        ).unwrap()
        a = tx.medicines.add(Medicine(MedicineId(0), "Ibuprofen", Money.of("2.00"), 10)).unwrap()
        b = tx.medicines.add(Medicine(MedicineId(0), "Paracetamol", Money.of("1.50"), 3)).unwrap()
        tx.commit().unwrap()
    return Seeded(client_id.value, a.value, b.value)


@pytest.fixture
def seeded(uow) -> Seeded:
    return seed(uow)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def usecases(uow, publisher) -> UseCases:
    return build_usecases(Settings(), uow=uow, events=publisher)


def stock_of(uow: UnitOfWork, medicine_id: int) -> int:
    with uow.begin() as tx:
        return tx.stock.level(MedicineId(medicine_id)).unwrap()


def order_count(uow: UnitOfWork) -> int:
    with uow.begin() as tx:
        return len(tx.orders.list().unwrap())
