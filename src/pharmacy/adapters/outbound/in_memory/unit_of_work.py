from __future__ import annotations

import logging

from returns.result import Failure, Result, Success

from pharmacy.adapters.outbound.in_memory.catalog import (
    InMemoryClientRepository,
    InMemoryMedicineRepository,
    InMemorySupplierRepository,
)
from pharmacy.adapters.outbound.in_memory.orders import InMemoryOrderRepository
from pharmacy.adapters.outbound.in_memory.stock import InMemoryStockLedger
from pharmacy.adapters.outbound.in_memory.store import InMemoryStore, Journal
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.ports.outbound.unit_of_work import PharmacyTransaction, UnitOfWork

log = logging.getLogger(__name__)


class InMemoryTransaction(PharmacyTransaction):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._journal = Journal()
        self.committed = False
        self.clients = InMemoryClientRepository(store, self._journal)
        self.medicines = InMemoryMedicineRepository(store, self._journal)
        self.suppliers = InMemorySupplierRepository(store, self._journal)
        self.orders = InMemoryOrderRepository(store, self._journal)
        self.stock = InMemoryStockLedger(store, self._journal)

    def commit(self) -> Result[None, PharmacyError]:
        with self._store.lock:
            for check in self._journal.checks:
                conflict = check()
                if conflict is not None:
                    log.info("commit refused: %s", conflict)
                    return Failure(conflict)
            for action in self._journal.redo:
                action()
        self._journal.clear()
        self.committed = True
        return Success(None)

    def rollback(self) -> None:
        undo = list(reversed(self._journal.undo))
        self._journal.clear()
        for action in undo:
            action()
        if undo:
            log.debug("rolled back %d stock change(s)", len(undo))


class _InMemoryTransactionScope:
    def __init__(self, store: InMemoryStore) -> None:
        self._tx = InMemoryTransaction(store)

    def __enter__(self) -> InMemoryTransaction:
        return self._tx

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self._tx.committed:
            self._tx.rollback()
        return False


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()

    def begin(self) -> _InMemoryTransactionScope:
        return _InMemoryTransactionScope(self.store)
