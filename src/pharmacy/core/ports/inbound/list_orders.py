from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Protocol, Sequence

from returns.result import Result

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.domain.model.order import ClientId, Money, OrderId, OrderSummary


@dataclass(frozen=True)
class ListOrdersQuery:
    client_id: int | None = None


@dataclass(frozen=True)
class OrderSummaryView:
    order_id: OrderId
    client_id: ClientId
    order_date: date
    total: Money


class ListOrdersUseCase(Protocol):
    def list_orders(
        self, query: ListOrdersQuery
    ) -> Result[Sequence[OrderSummaryView], PharmacyError]: ...

    def detailed_summaries(self) -> Result[Sequence[OrderSummary], PharmacyError]: ...
