from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Sequence, Tuple

from returns.pipeline import flow
from returns.pointfree import bind, map_
from returns.result import Failure, Result, Success

from pharmacy.core.domain.model.errors import (
    OrderCreationFailed,
    PharmacyError,
    StorageFailure,
    ValidationError,
)
from pharmacy.core.domain.model.order import (
    DEFAULT_CURRENCY,
    ClientId,
    MedicineId,
    OrderId,
    OrderLine,
    fold_money,
    today,
)
from pharmacy.core.ports.inbound.get_order import OrderLineView
from pharmacy.core.ports.inbound.place_order import (
    OrderReceipt,
    PlaceOrderCommand,
    PlaceOrderLine,
    PlaceOrderUseCase,
)
from pharmacy.core.ports.outbound.events import EventPublisher, OrderPlaced
from pharmacy.core.ports.outbound.unit_of_work import PharmacyTransaction, UnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlaceOrderDeps:
    uow: UnitOfWork
    events: EventPublisher
    currency: str = DEFAULT_CURRENCY
    clock: Callable[[], date] = today


@dataclass(frozen=True)
class PlaceOrderService(PlaceOrderUseCase):
    """
    Creates an order header, its lines and the matching stock decrements as
    one unit of work.

    Any failing line aborts the whole order: the header, every line already
    inserted and every stock decrement already applied are rolled back, and
    no order id is handed out.
    """

    deps: PlaceOrderDeps

    def place_order(
        self, command: PlaceOrderCommand
    ) -> Result[OrderReceipt, PharmacyError]:
        v = _validate_command(command)
        if isinstance(v, Failure):
            return v

        client_id = ClientId(command.client_id)
        quantities = _merge_lines(command.lines)

        try:
            with self.deps.uow.begin() as tx:
                result = self._run_in(tx, client_id, quantities)
        except StorageFailure as exc:
            result = Failure(
                OrderCreationFailed(message="transaction boundary failed", reason=exc)
            )

        if isinstance(result, Success):
            receipt = result.unwrap()
            log.info(
                "order %s committed for client %s: %d line(s), total %s %s",
                receipt.order_id.value,
                client_id.value,
                len(receipt.lines),
                receipt.total.amount,
                receipt.total.currency,
            )
            self._publish(receipt)
        else:
            log.warning("order for client %s aborted: %s", client_id.value, result.failure())

        return result

    # ---- transaction steps -------------------------------------------------

    def _run_in(
        self,
        tx: PharmacyTransaction,
        client_id: ClientId,
        quantities: Sequence[Tuple[MedicineId, int]],
    ) -> Result[OrderReceipt, PharmacyError]:
        header = tx.orders.insert_header(client_id, self.deps.clock())
        if isinstance(header, Failure):
            return Failure(
                OrderCreationFailed(
                    message="order header could not be inserted", reason=header.failure()
                )
            )
        order_id = header.unwrap()
        log.debug("order %s opened for client %s", order_id.value, client_id.value)

        lines: List[OrderLine] = []
        for medicine_id, quantity in quantities:
            processed = self._process_line(tx, order_id, medicine_id, quantity)
            if isinstance(processed, Failure):
                return Failure(
                    OrderCreationFailed(
                        message="order line failed, nothing was kept",
                        reason=processed.failure(),
                        medicine_id=medicine_id.value,
                    )
                )
            line = processed.unwrap()
            lines.append(line)
            log.debug(
                "order %s: medicine %s x%d at %s",
                order_id.value,
                medicine_id.value,
                quantity,
                line.unit_price.amount,
            )

        total = fold_money((ln.subtotal() for ln in lines), currency=self.deps.currency)
        finalized = flow(
            tx.orders.update_total(order_id, total),
            bind(lambda _: tx.commit()),
        )
        if isinstance(finalized, Failure):
            return Failure(
                OrderCreationFailed(
                    message="order could not be finalized", reason=finalized.failure()
                )
            )

        return Success(
            OrderReceipt(
                order_id, client_id, total, tuple(OrderLineView.of(ln) for ln in lines)
            )
        )

    def _process_line(
        self,
        tx: PharmacyTransaction,
        order_id: OrderId,
        medicine_id: MedicineId,
        quantity: int,
    ) -> Result[OrderLine, PharmacyError]:
        # the line keeps the price read here, whatever the catalog says later
        return flow(
            tx.medicines.get_unit_price(medicine_id),
            map_(lambda price: OrderLine(medicine_id, quantity, price)),
            bind(lambda line: tx.orders.insert_line(order_id, line).map(lambda _: line)),
            bind(lambda line: tx.stock.decrement(medicine_id, quantity).map(lambda _: line)),
        )

    def _publish(self, receipt: OrderReceipt) -> None:
        published = self.deps.events.publish(OrderPlaced(receipt.order_id, receipt.total))
        if isinstance(published, Failure):
            # the order is already committed
            log.warning(
                "order %s placed but event not published: %s",
                receipt.order_id.value,
                published.failure(),
            )


# ---- pure helpers ----------------------------------------------------------


def _validate_command(
    cmd: PlaceOrderCommand,
) -> Result[PlaceOrderCommand, PharmacyError]:
    if cmd.client_id <= 0:
        return Failure(ValidationError("client_id must be > 0"))
    if not cmd.lines:
        return Failure(ValidationError("at least one line item is required"))

    for i, ln in enumerate(cmd.lines):
        if ln.medicine_id <= 0:
            return Failure(ValidationError(f"lines[{i}].medicine_id must be > 0"))
        if ln.quantity <= 0:
            return Failure(ValidationError(f"lines[{i}].quantity must be > 0"))

    return Success(cmd)


def _merge_lines(lines: Sequence[PlaceOrderLine]) -> List[Tuple[MedicineId, int]]:
    """Sum quantities of repeated medicines, keeping first-seen order."""
    merged: Dict[int, int] = {}
    for ln in lines:
        merged[ln.medicine_id] = merged.get(ln.medicine_id, 0) + ln.quantity
    return [(MedicineId(mid), qty) for mid, qty in merged.items()]
