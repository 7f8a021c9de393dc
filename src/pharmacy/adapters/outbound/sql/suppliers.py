from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Failure, Result, Success
from sqlalchemy import delete, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Connection, Row
from sqlalchemy.exc import SQLAlchemyError

from pharmacy.adapters.outbound.sql.errors import storage_error
from pharmacy.adapters.outbound.sql.schema import supplier_medicine_table, supplier_table
from pharmacy.core.domain.model.catalog import Address, Supplier, SupplierMedicine
from pharmacy.core.domain.model.errors import NotFound, PharmacyError
from pharmacy.core.domain.model.order import DEFAULT_CURRENCY, MedicineId, Money, SupplierId
from pharmacy.core.ports.outbound.suppliers import SupplierRepository

_UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


@dataclass
class SqlSupplierRepository(SupplierRepository):
    conn: Connection
    currency: str = DEFAULT_CURRENCY

    def add(self, supplier: Supplier) -> Result[SupplierId, PharmacyError]:
        addr = supplier.address
        stmt = insert(supplier_table).values(
            name=supplier.name,
            country=addr.country,
            city=addr.city,
            street=addr.street,
            postal_code=addr.postal_code,
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "add supplier"))
        return Success(SupplierId(res.inserted_primary_key[0]))

    def list_all(self) -> Result[Sequence[Supplier], PharmacyError]:
        stmt = select(supplier_table).order_by(
            supplier_table.c.name, supplier_table.c.supplier_id
        )
        try:
            rows = self.conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "list suppliers"))
        return Success(tuple(_to_supplier(r) for r in rows))

    def delete(self, supplier_id: SupplierId) -> Result[None, PharmacyError]:
        stmt = delete(supplier_table).where(
            supplier_table.c.supplier_id == supplier_id.value
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            # the supplier still has medicine links
            return Failure(storage_error(exc, f"delete supplier {supplier_id.value}"))
        if res.rowcount == 0:
            return Failure(
                NotFound(
                    message="supplier does not exist",
                    entity="supplier",
                    entity_id=supplier_id.value,
                )
            )
        return Success(None)

    def link_medicine(self, link: SupplierMedicine) -> Result[None, PharmacyError]:
        values = {
            "supplier_id": link.supplier_id.value,
            "medicine_id": link.medicine_id.value,
            "supply_price": link.supply_price.amount,
        }
        try:
            self._upsert(values)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "link medicine to supplier"))
        return Success(None)

    def medicines_of(
        self, supplier_id: SupplierId
    ) -> Result[Sequence[SupplierMedicine], PharmacyError]:
        stmt = (
            select(supplier_medicine_table)
            .where(supplier_medicine_table.c.supplier_id == supplier_id.value)
            .order_by(supplier_medicine_table.c.medicine_id)
        )
        try:
            rows = self.conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "list supplier medicines"))
        return Success(
            tuple(
                SupplierMedicine(
                    supplier_id=SupplierId(r.supplier_id),
                    medicine_id=MedicineId(r.medicine_id),
                    supply_price=Money.of(r.supply_price, self.currency),
                )
                for r in rows
            )
        )

    def _upsert(self, values: dict) -> None:
        dialect_insert = _UPSERT_DIALECTS.get(self.conn.dialect.name)
        if dialect_insert is not None:
            stmt = dialect_insert(supplier_medicine_table).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["supplier_id", "medicine_id"],
                set_={"supply_price": stmt.excluded.supply_price},
            )
            self.conn.execute(stmt)
            return

        t = supplier_medicine_table
        res = self.conn.execute(
            update(t)
            .where(
                t.c.supplier_id == values["supplier_id"],
                t.c.medicine_id == values["medicine_id"],
            )
            .values(supply_price=values["supply_price"])
        )
        if res.rowcount == 0:
            self.conn.execute(insert(t).values(**values))


def _to_supplier(row: Row) -> Supplier:
    return Supplier(
        supplier_id=SupplierId(row.supplier_id),
        name=row.name,
        address=Address(row.country, row.city, row.street, row.postal_code),
    )
