from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import (
    ClientId,
    Money,
    Order,
    OrderId,
    OrderLine,
    OrderSummary,
)


class OrderRepository(Protocol):
    def insert_header(
        self, client_id: ClientId, order_date: date
    ) -> Result[OrderId, PharmacyError]:
        """Insert an order row with a zero total and return its generated id."""
        ...

    def insert_line(
        self, order_id: OrderId, line: OrderLine
    ) -> Result[None, PharmacyError]: ...

    def update_total(self, order_id: OrderId, total: Money) -> Result[None, PharmacyError]: ...

    def get(self, order_id: OrderId) -> Result[Order, PharmacyError]:
        """The order header with its lines."""
        ...

    def list(self, client_id: ClientId | None = None) -> Result[Sequence[Order], PharmacyError]:
        """Order headers, newest first. Lines are not loaded."""
        ...

    def summaries(self) -> Result[Sequence[OrderSummary], PharmacyError]: ...

    def delete(self, order_id: OrderId) -> Result[None, PharmacyError]:
        """Remove the order and its lines. Stock is not restored."""
        ...
