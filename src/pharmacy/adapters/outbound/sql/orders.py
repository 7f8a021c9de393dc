from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from returns.result import Failure, Result, Success
from sqlalchemy import Date, Integer, delete, insert, select, text, update
from sqlalchemy.engine import Connection, Row
from sqlalchemy.exc import SQLAlchemyError

from pharmacy.adapters.outbound.sql.errors import storage_error
from pharmacy.adapters.outbound.sql.schema import (
    DETAILED_ORDER_SUMMARY,
    PRICE,
    order_item_table,
    order_table,
)
from pharmacy.core.domain.model.errors import NotFound, PharmacyError
from pharmacy.core.domain.model.order import (
    DEFAULT_CURRENCY,
    ClientId,
    MedicineId,
    Money,
    Order,
    OrderId,
    OrderLine,
    OrderSummary,
)
from pharmacy.core.ports.outbound.orders import OrderRepository

_SUMMARIES = text(
    "SELECT order_id, order_date, client_first_name, client_last_name, "
    f"total_price, total_items_count FROM {DETAILED_ORDER_SUMMARY} "
    "ORDER BY order_date DESC, order_id DESC"
).columns(
    order_id=Integer,
    order_date=Date,
    total_price=PRICE,
    total_items_count=Integer,
)


def _not_found(order_id: OrderId) -> NotFound:
    return NotFound(message="order does not exist", entity="order", entity_id=order_id.value)


@dataclass
class SqlOrderRepository(OrderRepository):
    conn: Connection
    currency: str = DEFAULT_CURRENCY

    def insert_header(
        self, client_id: ClientId, order_date: date
    ) -> Result[OrderId, PharmacyError]:
        stmt = insert(order_table).values(
            client_id=client_id.value,
            order_date=order_date,
            total_price=Decimal("0.00"),
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, f"insert order for client {client_id.value}"))
        return Success(OrderId(res.inserted_primary_key[0]))

    def insert_line(self, order_id: OrderId, line: OrderLine) -> Result[None, PharmacyError]:
        stmt = insert(order_item_table).values(
            order_id=order_id.value,
            medicine_id=line.medicine_id.value,
            quantity=line.quantity,
            unit_price=line.unit_price.amount,
        )
        try:
            self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "insert order line"))
        return Success(None)

    def update_total(self, order_id: OrderId, total: Money) -> Result[None, PharmacyError]:
        stmt = (
            update(order_table)
            .where(order_table.c.order_id == order_id.value)
            .values(total_price=total.amount)
        )
        try:
            res = self.conn.execute(stmt)
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "update order total"))
        if res.rowcount == 0:
            return Failure(_not_found(order_id))
        return Success(None)

    def get(self, order_id: OrderId) -> Result[Order, PharmacyError]:
        header_stmt = select(order_table).where(order_table.c.order_id == order_id.value)
        lines_stmt = (
            select(order_item_table)
            .where(order_item_table.c.order_id == order_id.value)
            .order_by(order_item_table.c.medicine_id)
        )
        try:
            header = self.conn.execute(header_stmt).one_or_none()
            rows = self.conn.execute(lines_stmt).all() if header is not None else []
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "load order"))
        if header is None:
            return Failure(_not_found(order_id))

        lines = tuple(
            OrderLine(
                medicine_id=MedicineId(r.medicine_id),
                quantity=r.quantity,
                unit_price=Money.of(r.unit_price, self.currency),
            )
            for r in rows
        )
        return Success(self._to_order(header, lines))

    def list(self, client_id: ClientId | None = None) -> Result[Sequence[Order], PharmacyError]:
        stmt = select(order_table).order_by(
            order_table.c.order_date.desc(), order_table.c.order_id.desc()
        )
        if client_id is not None:
            stmt = stmt.where(order_table.c.client_id == client_id.value)
        try:
            rows = self.conn.execute(stmt).all()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "list orders"))
        return Success(tuple(self._to_order(r) for r in rows))

    def summaries(self) -> Result[Sequence[OrderSummary], PharmacyError]:
        try:
            rows = self.conn.execute(_SUMMARIES).all()
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, "read order summaries"))
        return Success(
            tuple(
                OrderSummary(
                    order_id=OrderId(r.order_id),
                    order_date=r.order_date,
                    client_first_name=r.client_first_name,
                    client_last_name=r.client_last_name,
                    total=Money.of(r.total_price, self.currency),
                    total_items_count=r.total_items_count,
                )
                for r in rows
            )
        )

    def delete(self, order_id: OrderId) -> Result[None, PharmacyError]:
        try:
            self.conn.execute(
                delete(order_item_table).where(order_item_table.c.order_id == order_id.value)
            )
            res = self.conn.execute(
                delete(order_table).where(order_table.c.order_id == order_id.value)
            )
        except SQLAlchemyError as exc:
            return Failure(storage_error(exc, f"delete order {order_id.value}"))
        if res.rowcount == 0:
            return Failure(_not_found(order_id))
        return Success(None)

    def _to_order(self, row: Row, lines: tuple = ()) -> Order:
        return Order(
            order_id=OrderId(row.order_id),
            client_id=ClientId(row.client_id),
            order_date=row.order_date,
            total=Money.of(row.total_price, self.currency),
            lines=lines,
        )
