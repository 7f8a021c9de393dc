from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import ClientId, Money, OrderId, OrderLine


@dataclass(frozen=True)
class GetOrderQuery:
    order_id: int


@dataclass(frozen=True)
class OrderLineView:
    medicine_id: int
    unit_price: Money
    quantity: int
    subtotal: Money

    @staticmethod
    def of(line: OrderLine) -> "OrderLineView":
        return OrderLineView(
            medicine_id=line.medicine_id.value,
            unit_price=line.unit_price,
            quantity=line.quantity,
            subtotal=line.subtotal(),
        )


@dataclass(frozen=True)
class OrderView:
    order_id: OrderId
    client_id: ClientId
    order_date: date
    total: Money
    lines: Sequence[OrderLineView]


class GetOrderUseCase(Protocol):
    def get_order(self, query: GetOrderQuery) -> Result[OrderView, PharmacyError]: ...

    def delete_order(self, query: GetOrderQuery) -> Result[None, PharmacyError]: ...
