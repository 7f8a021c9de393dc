from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import ClientId, Money, OrderId
from pharmacy.core.ports.inbound.get_order import OrderLineView


@dataclass(frozen=True)
class PlaceOrderLine:
    medicine_id: int
    quantity: int


@dataclass(frozen=True)
class PlaceOrderCommand:
    client_id: int
    lines: Sequence[PlaceOrderLine]

    @staticmethod
    def from_mapping(client_id: int, quantities: Mapping[int, int]) -> "PlaceOrderCommand":
        return PlaceOrderCommand(
            client_id=client_id,
            lines=tuple(PlaceOrderLine(mid, qty) for mid, qty in quantities.items()),
        )


@dataclass(frozen=True)
class OrderReceipt:
    order_id: OrderId
    client_id: ClientId
    total: Money
    lines: Sequence[OrderLineView]


class PlaceOrderUseCase(Protocol):
    def place_order(
        self, command: PlaceOrderCommand
    ) -> Result[OrderReceipt, PharmacyError]: ...
