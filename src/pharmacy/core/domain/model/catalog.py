from __future__ import annotations

from dataclasses import dataclass

from pharmacy.core.domain.model.errors import ValidationError
from pharmacy.core.domain.model.order import ClientId, MedicineId, Money, SupplierId


def _required(value: str | None, label: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{label} is required")
    return cleaned


@dataclass(frozen=True)
class Address:
    country: str
    city: str
    street: str
    postal_code: str

    def __post_init__(self) -> None:
        # whitespace is trimmed before the emptiness check
        object.__setattr__(self, "country", _required(self.country, "country"))
        object.__setattr__(self, "city", _required(self.city, "city"))
        object.__setattr__(self, "street", _required(self.street, "street"))
        object.__setattr__(self, "postal_code", _required(self.postal_code, "postal_code"))


@dataclass(frozen=True)
class Client:
    """A pharmacy customer. ``client_id`` 0 means not yet stored."""

    client_id: ClientId
    first_name: str
    last_name: str
    address: Address

    def __post_init__(self) -> None:
        if self.client_id.value < 0:
            raise ValidationError("client_id must not be negative")
        _required(self.first_name, "first_name")
        _required(self.last_name, "last_name")


@dataclass(frozen=True)
class Medicine:
    medicine_id: MedicineId
    name: str
    unit_price: Money
    stock: int

    def __post_init__(self) -> None:
        if self.medicine_id.value < 0:
            raise ValidationError("medicine_id must not be negative")
        _required(self.name, "name")
        if not self.unit_price.is_positive():
            raise ValidationError("unit_price must be > 0")
        if self.stock < 0:
            raise ValidationError("stock must not be negative")


@dataclass(frozen=True)
class Supplier:
    supplier_id: SupplierId
    name: str
    address: Address

    def __post_init__(self) -> None:
        if self.supplier_id.value < 0:
            raise ValidationError("supplier_id must not be negative")
        _required(self.name, "name")


@dataclass(frozen=True)
class SupplierMedicine:
    supplier_id: SupplierId
    medicine_id: MedicineId
    supply_price: Money

    def __post_init__(self) -> None:
        if self.supplier_id.value <= 0:
            raise ValidationError("supplier_id must be > 0")
        if self.medicine_id.value <= 0:
            raise ValidationError("medicine_id must be > 0")
        if not self.supply_price.is_positive():
            raise ValidationError("supply_price must be > 0")
