from __future__ import annotations

import logging
from dataclasses import dataclass

from returns.result import Failure, Result

from pharmacy.core.domain.model.errors import PharmacyError, ValidationError
from pharmacy.core.domain.model.order import Order, OrderId
from pharmacy.core.ports.inbound.get_order import (
    GetOrderQuery,
    GetOrderUseCase,
    OrderLineView,
    OrderView,
)
from pharmacy.core.ports.outbound.unit_of_work import UnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GetOrderDeps:
    uow: UnitOfWork


@dataclass(frozen=True)
class GetOrderService(GetOrderUseCase):
    deps: GetOrderDeps

    def get_order(self, query: GetOrderQuery) -> Result[OrderView, PharmacyError]:
        if query.order_id <= 0:
            return Failure(ValidationError(message="order_id must be > 0"))

        with self.deps.uow.begin() as tx:
            return tx.orders.get(OrderId(query.order_id)).map(_to_view)

    def delete_order(self, query: GetOrderQuery) -> Result[None, PharmacyError]:
        if query.order_id <= 0:
            return Failure(ValidationError(message="order_id must be > 0"))

        # stock taken by the order stays taken
        with self.deps.uow.begin() as tx:
            result = tx.orders.delete(OrderId(query.order_id)).bind(lambda _: tx.commit())
        if not isinstance(result, Failure):
            log.info("order %s deleted", query.order_id)
        return result


def _to_view(order: Order) -> OrderView:
    return OrderView(
        order_id=order.order_id,
        client_id=order.client_id,
        order_date=order.order_date,
        total=order.total,
        lines=tuple(OrderLineView.of(ln) for ln in order.lines),
    )
