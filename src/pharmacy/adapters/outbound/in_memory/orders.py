from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Sequence

from returns.result import Failure, Result, Success

from pharmacy.adapters.outbound.in_memory.store import InMemoryStore, Journal
from pharmacy.core.domain.model.errors import IntegrityConflict, NotFound, PharmacyError
from pharmacy.core.domain.model.order import (
    ClientId,
    Money,
    Order,
    OrderId,
    OrderLine,
    OrderSummary,
)
from pharmacy.core.ports.outbound.orders import OrderRepository


@dataclass
class _PendingOrder:
    client_id: ClientId
    order_date: date
    total: Money
    lines: List[OrderLine] = field(default_factory=list)

    def build(self, order_id: int) -> Order:
        return Order(
            OrderId(order_id), self.client_id, self.order_date, self.total, tuple(self.lines)
        )


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """Orders written in a transaction stay private to it until commit."""

    store: InMemoryStore
    journal: Journal
    _pending: Dict[int, _PendingOrder] = field(default_factory=dict)

    def insert_header(
        self, client_id: ClientId, order_date: date
    ) -> Result[OrderId, PharmacyError]:
        with self.store.lock:
            if client_id.value not in self.store.clients:
                return Failure(
                    IntegrityConflict(message=f"client {client_id.value} does not exist")
                )
        oid = self.store.next_id("order")
        pending = _PendingOrder(client_id, order_date, Money.zero(self.store.currency))
        self._pending[oid] = pending
        self.journal.check_on_commit(lambda: self._dangling(pending))
        self.journal.on_commit(
            lambda: self.store.orders.__setitem__(oid, pending.build(oid))
        )
        return Success(OrderId(oid))

    def insert_line(self, order_id: OrderId, line: OrderLine) -> Result[None, PharmacyError]:
        pending = self._pending.get(order_id.value)
        if pending is None:
            return Failure(
                IntegrityConflict(message=f"order {order_id.value} is not open for writing")
            )
        with self.store.lock:
            known = line.medicine_id.value in self.store.medicines
        if not known:
            return Failure(
                IntegrityConflict(
                    message=f"medicine {line.medicine_id.value} does not exist"
                )
            )
        if any(ln.medicine_id == line.medicine_id for ln in pending.lines):
            return Failure(
                IntegrityConflict(
                    message=f"medicine {line.medicine_id.value} already on order {order_id.value}"
                )
            )
        pending.lines.append(line)
        return Success(None)

    def update_total(self, order_id: OrderId, total: Money) -> Result[None, PharmacyError]:
        oid = order_id.value
        pending = self._pending.get(oid)
        if pending is not None:
            pending.total = total
            return Success(None)

        with self.store.lock:
            if oid not in self.store.orders:
                return Failure(_not_found(oid))

        def apply() -> None:
            current = self.store.orders.get(oid)
            if current is not None:
                self.store.orders[oid] = replace(current, total=total)

        self.journal.on_commit(apply)
        return Success(None)

    def get(self, order_id: OrderId) -> Result[Order, PharmacyError]:
        with self.store.lock:
            order = self.store.orders.get(order_id.value)
        if order is None:
            return Failure(_not_found(order_id.value))
        return Success(order)

    def list(self, client_id: ClientId | None = None) -> Result[Sequence[Order], PharmacyError]:
        with self.store.lock:
            orders = list(self.store.orders.values())
        if client_id is not None:
            orders = [o for o in orders if o.client_id == client_id]
        orders.sort(key=lambda o: (o.order_date, o.order_id.value), reverse=True)
        return Success(tuple(replace(o, lines=()) for o in orders))

    def summaries(self) -> Result[Sequence[OrderSummary], PharmacyError]:
        with self.store.lock:
            rows = [
                (o, self.store.clients.get(o.client_id.value))
                for o in self.store.orders.values()
            ]
        summaries = [
            OrderSummary(
                order_id=o.order_id,
                order_date=o.order_date,
                client_first_name=c.first_name,
                client_last_name=c.last_name,
                total=o.total,
                total_items_count=sum(ln.quantity for ln in o.lines),
            )
            for o, c in rows
            if c is not None
        ]
        summaries.sort(key=lambda s: (s.order_date, s.order_id.value), reverse=True)
        return Success(tuple(summaries))

    def delete(self, order_id: OrderId) -> Result[None, PharmacyError]:
        oid = order_id.value
        with self.store.lock:
            if oid not in self.store.orders:
                return Failure(_not_found(oid))
        self.journal.on_commit(lambda: self.store.orders.pop(oid, None))
        return Success(None)

    def _dangling(self, pending: _PendingOrder) -> IntegrityConflict | None:
        # the client or a medicine may have been deleted since the order began
        if pending.client_id.value not in self.store.clients:
            return IntegrityConflict(
                message=f"client {pending.client_id.value} no longer exists"
            )
        for ln in pending.lines:
            if ln.medicine_id.value not in self.store.medicines:
                return IntegrityConflict(
                    message=f"medicine {ln.medicine_id.value} no longer exists"
                )
        return None


def _not_found(oid: int) -> NotFound:
    return NotFound(message="order does not exist", entity="order", entity_id=oid)
