from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Failure, Result, Success
from sqlalchemy import delete, insert, select, update
from sqlalchemy.engine import Connection, Row
from sqlalchemy.exc import SQLAlchemyError

from pharmacy.adapters.outbound.sql.errors import storage_error
from pharmacy.adapters.outbound.sql.schema import medicine_table
from pharmacy.core.domain.model.catalog import Medicine
from pharmacy.core.domain.model.errors import NotFound, PharmacyError
from pharmacy.core.domain.model.order import DEFAULT_CURRENCY, MedicineId, Money
from pharmacy.core.ports.outbound.medicines import MedicineRepository


def medicine_not_found(medicine_id: MedicineId) -> NotFound:
    return NotFound(
        message="medicine does not exist", entity="medicine", entity_id=medicine_id.value
    )


@dataclass
class SqlMedicineRepository(MedicineRepository):
    conn: Connection
    currency: str = DEFAULT_CURRENCY

    def get(self, medicine_id: MedicineId) -> Result[Medicine, PharmacyError]:
        stmt = select(medicine_table).where(
            medicine_table.c.medicine_id == medicine_id.value
        )
        try:
            row = self.conn.execute(stmt).one_or_none()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "load medicine"))
        if row is None:
            return Failure(medicine_not_found(medicine_id))
        return Success(self._to_medicine(row))

    def get_unit_price(self, medicine_id: MedicineId) -> Result[Money, PharmacyError]:
        stmt = select(medicine_table.c.unit_price).where(
            medicine_table.c.medicine_id == medicine_id.value
        )
        try:
            price = self.conn.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "read unit price"))
        if price is None:
            return Failure(medicine_not_found(medicine_id))
        return Success(Money.of(price, self.currency))

    def list_all(self) -> Result[Sequence[Medicine], PharmacyError]:
        stmt = select(medicine_table).order_by(
            medicine_table.c.name, medicine_table.c.medicine_id
        )
        try:
            rows = self.conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "list medicines"))
        return Success(tuple(self._to_medicine(r) for r in rows))

    def add(self, medicine: Medicine) -> Result[MedicineId, PharmacyError]:
        stmt = insert(medicine_table).values(
            name=medicine.name,
            unit_price=medicine.unit_price.amount,
            stock=medicine.stock,
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "add medicine"))
        return Success(MedicineId(res.inserted_primary_key[0]))

    def update_unit_price(
        self, medicine_id: MedicineId, unit_price: Money
    ) -> Result[None, PharmacyError]:
        stmt = (
            update(medicine_table)
            .where(medicine_table.c.medicine_id == medicine_id.value)
            .values(unit_price=unit_price.amount)
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "update unit price"))
        if res.rowcount == 0:
            return Failure(medicine_not_found(medicine_id))
        return Success(None)

    def delete(self, medicine_id: MedicineId) -> Result[None, PharmacyError]:
        stmt = delete(medicine_table).where(
            medicine_table.c.medicine_id == medicine_id.value
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            # still referenced by order lines or supplier links
            return Failure(storage_error(exc, f"delete medicine {medicine_id.value}"))
        if res.rowcount == 0:
            return Failure(medicine_not_found(medicine_id))
        return Success(None)

    def _to_medicine(self, row: Row) -> Medicine:
        return Medicine(
            medicine_id=MedicineId(row.medicine_id),
            name=row.name,
            unit_price=Money.of(row.unit_price, self.currency),
            stock=row.stock,
        )
