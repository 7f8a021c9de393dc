from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.catalog import Client, Medicine, Supplier, SupplierMedicine
from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import ClientId, MedicineId, SupplierId


@dataclass(frozen=True)
class AddressInput:
    country: str
    city: str
    street: str
    postal_code: str


@dataclass(frozen=True)
class NewClient:
    first_name: str
    last_name: str
    address: AddressInput


@dataclass(frozen=True)
class NewMedicine:
    name: str
    unit_price: Decimal
    stock: int


@dataclass(frozen=True)
class NewSupplier:
    name: str
    address: AddressInput


@dataclass(frozen=True)
class MedicineLink:
    supplier_id: int
    medicine_id: int
    supply_price: Decimal


class CatalogUseCase(Protocol):
    def add_client(self, new: NewClient) -> Result[ClientId, PharmacyError]: ...

    def update_client_address(
        self, client_id: int, address: AddressInput
    ) -> Result[None, PharmacyError]: ...

    def delete_client(self, client_id: int) -> Result[None, PharmacyError]: ...

    def list_clients(self) -> Result[Sequence[Client], PharmacyError]: ...

    def add_medicine(self, new: NewMedicine) -> Result[MedicineId, PharmacyError]: ...

    def change_unit_price(
        self, medicine_id: int, unit_price: Decimal
    ) -> Result[None, PharmacyError]: ...

    def delete_medicine(self, medicine_id: int) -> Result[None, PharmacyError]: ...

    def list_medicines(self) -> Result[Sequence[Medicine], PharmacyError]: ...

    def add_supplier(self, new: NewSupplier) -> Result[SupplierId, PharmacyError]: ...

    def delete_supplier(self, supplier_id: int) -> Result[None, PharmacyError]: ...

    def list_suppliers(self) -> Result[Sequence[Supplier], PharmacyError]: ...

    def link_medicine(self, link: MedicineLink) -> Result[None, PharmacyError]: ...

    def medicines_of_supplier(
        self, supplier_id: int
    ) -> Result[Sequence[SupplierMedicine], PharmacyError]: ...
