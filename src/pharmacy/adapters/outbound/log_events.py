from __future__ import annotations

import logging

from returns.result import Result, Success

from pharmacy.core.domain.model.errors import PharmacyError
from pharmacy.core.ports.outbound.events import EventPublisher, OrderPlaced

log = logging.getLogger(__name__)


class LoggingEventPublisher(EventPublisher):
    def publish(self, event: OrderPlaced) -> Result[None, PharmacyError]:
        log.info(
            "[event] order_placed: %s total=%s %s",
            event.order_id.value,
            event.total.amount,
            event.total.currency,
        )
        return Success(None)
