from __future__ import annotations

from typing import Protocol

from returns.result import Result

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import MedicineId


class StockLedger(Protocol):
    """
    Per-medicine available quantity.

    decrement() must be a single conditional step relative to other
    decrements of the same medicine: it subtracts only while stock >= quantity,
    so stock can never go negative under concurrent orders.
    """

    def decrement(
        self, medicine_id: MedicineId, quantity: int
    ) -> Result[None, PharmacyError]:
        """NotFound if the medicine is unknown, InsufficientStock if too few units."""
        ...

    def level(self, medicine_id: MedicineId) -> Result[int, PharmacyError]: ...
