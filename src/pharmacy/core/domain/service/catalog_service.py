from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Sequence, TypeVar

from returns.result import Failure, Result, Success

from pharmacy.core.domain.model.catalog import (
    Address,
    Client,
    Medicine,
    Supplier,
    SupplierMedicine,
)
from pharmacy.core.domain.model.errors import PharmacyError, ValidationError
from pharmacy.core.domain.model.order import (
    DEFAULT_CURRENCY,
    ClientId,
    MedicineId,
    Money,
    SupplierId,
)
from pharmacy.core.ports.inbound.catalog import (
    AddressInput,
    CatalogUseCase,
    MedicineLink,
    NewClient,
    NewMedicine,
    NewSupplier,
)
from pharmacy.core.ports.outbound.unit_of_work import PharmacyTransaction, UnitOfWork


T = TypeVar("T")


@dataclass(frozen=True)
class CatalogDeps:
    uow: UnitOfWork
    currency: str = DEFAULT_CURRENCY


@dataclass(frozen=True)
class CatalogService(CatalogUseCase):
    """Plain create/read/update/delete over clients, medicines and suppliers."""

    deps: CatalogDeps

    # ---- clients -----------------------------------------------------------

    def add_client(self, new: NewClient) -> Result[ClientId, PharmacyError]:
        return _build(
            lambda: Client(ClientId(0), new.first_name, new.last_name, _address(new.address))
        ).bind(lambda client: self._write(lambda tx: tx.clients.add(client)))

    def update_client_address(
        self, client_id: int, address: AddressInput
    ) -> Result[None, PharmacyError]:
        checked = _positive(client_id, "client_id").bind(
            lambda _: _build(lambda: _address(address))
        )
        return checked.bind(
            lambda addr: self._write(
                lambda tx: tx.clients.update_address(ClientId(client_id), addr)
            )
        )

    def delete_client(self, client_id: int) -> Result[None, PharmacyError]:
        return _positive(client_id, "client_id").bind(
            lambda _: self._write(lambda tx: tx.clients.delete(ClientId(client_id)))
        )

    def list_clients(self) -> Result[Sequence[Client], PharmacyError]:
        return self._read(lambda tx: tx.clients.list_all())

    # ---- medicines ---------------------------------------------------------

    def add_medicine(self, new: NewMedicine) -> Result[MedicineId, PharmacyError]:
        return _build(
            lambda: Medicine(
                MedicineId(0),
                new.name,
                Money.of(new.unit_price, self.deps.currency),
                new.stock,
            )
        ).bind(lambda medicine: self._write(lambda tx: tx.medicines.add(medicine)))

    def change_unit_price(
        self, medicine_id: int, unit_price: Decimal
    ) -> Result[None, PharmacyError]:
        checked = _positive(medicine_id, "medicine_id").bind(
            lambda _: _build(lambda: Money.of(unit_price, self.deps.currency))
        )
        return checked.bind(_positive_price).bind(
            lambda price: self._write(
                lambda tx: tx.medicines.update_unit_price(MedicineId(medicine_id), price)
            )
        )

    def delete_medicine(self, medicine_id: int) -> Result[None, PharmacyError]:
        return _positive(medicine_id, "medicine_id").bind(
            lambda _: self._write(lambda tx: tx.medicines.delete(MedicineId(medicine_id)))
        )

    def list_medicines(self) -> Result[Sequence[Medicine], PharmacyError]:
        return self._read(lambda tx: tx.medicines.list_all())

    # ---- suppliers ---------------------------------------------------------

    def add_supplier(self, new: NewSupplier) -> Result[SupplierId, PharmacyError]:
        return _build(
            lambda: Supplier(SupplierId(0), new.name, _address(new.address))
        ).bind(lambda supplier: self._write(lambda tx: tx.suppliers.add(supplier)))

    def delete_supplier(self, supplier_id: int) -> Result[None, PharmacyError]:
        return _positive(supplier_id, "supplier_id").bind(
            lambda _: self._write(lambda tx: tx.suppliers.delete(SupplierId(supplier_id)))
        )

    def list_suppliers(self) -> Result[Sequence[Supplier], PharmacyError]:
        return self._read(lambda tx: tx.suppliers.list_all())

    def link_medicine(self, link: MedicineLink) -> Result[None, PharmacyError]:
        return _build(
            lambda: SupplierMedicine(
                SupplierId(link.supplier_id),
                MedicineId(link.medicine_id),
                Money.of(link.supply_price, self.deps.currency),
            )
        ).bind(lambda sm: self._write(lambda tx: tx.suppliers.link_medicine(sm)))

    def medicines_of_supplier(
        self, supplier_id: int
    ) -> Result[Sequence[SupplierMedicine], PharmacyError]:
        return _positive(supplier_id, "supplier_id").bind(
            lambda _: self._read(lambda tx: tx.suppliers.medicines_of(SupplierId(supplier_id)))
        )

    # ---- transaction helpers -----------------------------------------------

    def _write(
        self, op: Callable[[PharmacyTransaction], Result[T, PharmacyError]]
    ) -> Result[T, PharmacyError]:
        with self.deps.uow.begin() as tx:
            result = op(tx)
            return result.bind(lambda value: tx.commit().map(lambda _: value))

    def _read(
        self, op: Callable[[PharmacyTransaction], Result[T, PharmacyError]]
    ) -> Result[T, PharmacyError]:
        with self.deps.uow.begin() as tx:
            return op(tx)


def _address(inp: AddressInput) -> Address:
    return Address(inp.country, inp.city, inp.street, inp.postal_code)


def _build(factory: Callable[[], T]) -> Result[T, PharmacyError]:
    try:
        return Success(factory())
    except ValidationError as exc:
        return Failure(exc)


def _positive_price(price: Money) -> Result[Money, PharmacyError]:
    if not price.is_positive():
        return Failure(ValidationError("unit_price must be > 0"))
    return Success(price)


def _positive(value: int, label: str) -> Result[int, PharmacyError]:
    if value <= 0:
        return Failure(ValidationError(f"{label} must be > 0"))
    return Success(value)
