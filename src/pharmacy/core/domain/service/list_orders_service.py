from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from returns.result import Failure, Result

from pharmacy.core.domain.model.errors import PharmacyError, ValidationError
from pharmacy.core.domain.model.order import ClientId, Order, OrderSummary
from pharmacy.core.ports.inbound.list_orders import (
    ListOrdersQuery,
    ListOrdersUseCase,
    OrderSummaryView,
)
from pharmacy.core.ports.outbound.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class ListOrdersDeps:
    uow: UnitOfWork


@dataclass(frozen=True)
class ListOrdersService(ListOrdersUseCase):
    deps: ListOrdersDeps

    def list_orders(
        self, query: ListOrdersQuery
    ) -> Result[Sequence[OrderSummaryView], PharmacyError]:
        client: ClientId | None = None
        if query.client_id is not None:
            if query.client_id <= 0:
                return Failure(
                    ValidationError(message="client_id must be > 0 when provided")
                )
            client = ClientId(query.client_id)

        with self.deps.uow.begin() as tx:
            return tx.orders.list(client_id=client).map(_to_summaries)

    def detailed_summaries(self) -> Result[Sequence[OrderSummary], PharmacyError]:
        with self.deps.uow.begin() as tx:
            return tx.orders.summaries()


def _to_summaries(orders: Sequence[Order]) -> Sequence[OrderSummaryView]:
    return tuple(
        OrderSummaryView(
            order_id=o.order_id,
            client_id=o.client_id,
            order_date=o.order_date,
            total=o.total,
        )
        for o in orders
    )
