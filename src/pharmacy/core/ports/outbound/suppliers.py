from __future__ import annotations

from typing import Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.catalog import Supplier, SupplierMedicine
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import SupplierId


class SupplierRepository(Protocol):
    def add(self, supplier: Supplier) -> Result[SupplierId, PharmacyError]: ...

    def list_all(self) -> Result[Sequence[Supplier], PharmacyError]: ...

    def delete(self, supplier_id: SupplierId) -> Result[None, PharmacyError]: ...

    def link_medicine(self, link: SupplierMedicine) -> Result[None, PharmacyError]:
        """Insert the link, or update its supply price if it already exists."""
        ...

    def medicines_of(
        self, supplier_id: SupplierId
    ) -> Result[Sequence[SupplierMedicine], PharmacyError]: ...
