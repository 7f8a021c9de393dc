from __future__ import annotations

from dataclasses import dataclass, replace

from returns.result import Failure, Result, Success

from pharmacy.adapters.outbound.in_memory.store import InMemoryStore, Journal
from pharmacy.core.domain.model.errors import (
    InsufficientStock,
    NotFound,
    PharmacyError,
    ValidationError,
)
from pharmacy.core.domain.model.order import MedicineId
from pharmacy.core.ports.outbound.stock import StockLedger


@dataclass
class InMemoryStockLedger(StockLedger):
    """
    Decrements are applied to the shared store at once, under the medicine's
    lock, and given back if the owning transaction rolls back.
    """

    store: InMemoryStore
    journal: Journal

    def decrement(
        self, medicine_id: MedicineId, quantity: int
    ) -> Result[None, PharmacyError]:
        if quantity <= 0:
            return Failure(ValidationError("quantity must be > 0"))

        mid = medicine_id.value
        with self.store.medicine_lock(mid):
            med = self.store.medicines.get(mid)
            if med is None:
                return Failure(_not_found(mid))
            if med.stock < quantity:
                return Failure(
                    InsufficientStock(
                        message="not enough units in stock",
                        medicine_id=mid,
                        requested=quantity,
                        available=med.stock,
                    )
                )
            self.store.medicines[mid] = replace(med, stock=med.stock - quantity)

        self.journal.on_rollback(lambda: self._give_back(mid, quantity))
        return Success(None)

    def level(self, medicine_id: MedicineId) -> Result[int, PharmacyError]:
        mid = medicine_id.value
        with self.store.medicine_lock(mid):
            med = self.store.medicines.get(mid)
        if med is None:
            return Failure(_not_found(mid))
        return Success(med.stock)

    def _give_back(self, mid: int, quantity: int) -> None:
        with self.store.medicine_lock(mid):
            med = self.store.medicines.get(mid)
            if med is not None:
                self.store.medicines[mid] = replace(med, stock=med.stock + quantity)


def _not_found(mid: int) -> NotFound:
    return NotFound(message="medicine does not exist", entity="medicine", entity_id=mid)
