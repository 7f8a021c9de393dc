from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result, Success
from sqlalchemy import select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from pharmacy.adapters.outbound.sql.errors import storage_error
from pharmacy.adapters.outbound.sql.medicines import medicine_not_found
from pharmacy.adapters.outbound.sql.schema import medicine_table
from pharmacy.core.domain.model.errors import (
    InsufficientStock,
    PharmacyError,
    ValidationError,
)
from pharmacy.core.domain.model.order import MedicineId
from pharmacy.core.ports.outbound.stock import StockLedger


@dataclass
class SqlStockLedger(StockLedger):
    """
    Conditional decrement expressed as one UPDATE ... WHERE stock >= :qty.

    The row lookup beforehand only tells "unknown medicine" apart from
    "not enough units"; the UPDATE alone decides whether units are taken, so
    two concurrent orders can never both take the last units.
    """

    conn: Connection

    def decrement(
        self, medicine_id: MedicineId, quantity: int
    ) -> Result[None, PharmacyError]:
        if quantity <= 0:
            return Failure(ValidationError("quantity must be > 0"))
        return self.level(medicine_id).bind(
            lambda available: self._take(medicine_id, quantity, available)
        )

    def level(self, medicine_id: MedicineId) -> Result[int, PharmacyError]:
        stmt = select(medicine_table.c.stock).where(
            medicine_table.c.medicine_id == medicine_id.value
        )
        try:
            stock = self.conn.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "read stock"))
        if stock is None:
            return Failure(medicine_not_found(medicine_id))
        return Success(stock)

    def _take(
        self, medicine_id: MedicineId, quantity: int, available: int
    ) -> Result[None, PharmacyError]:
        stmt = (
            update(medicine_table)
            .where(
                medicine_table.c.medicine_id == medicine_id.value,
                medicine_table.c.stock >= quantity,
            )
            .values(stock=medicine_table.c.stock - quantity)
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "decrement stock"))
        if res.rowcount == 0:
            return Failure(
                InsufficientStock(
                    message="not enough units in stock",
                    medicine_id=medicine_id.value,
                    requested=quantity,
                    available=available,
                )
            )
        return Success(None)
