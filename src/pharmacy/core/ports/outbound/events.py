from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import Money, OrderId


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    total: Money


class EventPublisher(Protocol):
    def publish(self, event: OrderPlaced) -> Result[None, PharmacyError]: ...
