from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.catalog import Medicine
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import MedicineId, Money


class MedicineRepository(Protocol):
    def get(self, medicine_id: MedicineId) -> Result[Medicine, PharmacyError]: ...

    def get_unit_price(self, medicine_id: MedicineId) -> Result[Money, PharmacyError]: ...

    def list_all(self) -> Result[Sequence[Medicine], PharmacyError]: ...

    def add(self, medicine: Medicine) -> Result[MedicineId, PharmacyError]: ...

    def update_unit_price(
        self, medicine_id: MedicineId, unit_price: Money
    ) -> Result[None, PharmacyError]: ...

    def delete(self, medicine_id: MedicineId) -> Result[None, PharmacyError]: ...
