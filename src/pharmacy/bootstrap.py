from __future__ import annotations

import logging
from dataclasses import dataclass

from pharmacy.adapters.outbound.in_memory.store import InMemoryStore
from pharmacy.adapters.outbound.in_memory.unit_of_work import InMemoryUnitOfWork
from pharmacy.adapters.outbound.log_events import LoggingEventPublisher
from pharmacy.adapters.outbound.sql.engine import create_pharmacy_engine
from pharmacy.adapters.outbound.sql.schema import create_schema
from pharmacy.adapters.outbound.sql.unit_of_work import SqlUnitOfWork
from pharmacy.config import Settings
from pharmacy.core.domain.service.catalog_service import CatalogDeps, CatalogService
from pharmacy.core.domain.service.get_order_service import GetOrderDeps, GetOrderService
from pharmacy.core.domain.service.list_orders_service import (
    ListOrdersDeps,
    ListOrdersService,
)
from pharmacy.core.domain.service.place_order_service import (
    PlaceOrderDeps,
    PlaceOrderService,
)
from pharmacy.core.ports.outbound.events import EventPublisher
from pharmacy.core.ports.outbound.unit_of_work import UnitOfWork

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class UseCases:
    place_order: PlaceOrderService
    get_order: GetOrderService
    list_orders: ListOrdersService
    catalog: CatalogService


def build_unit_of_work(settings: Settings) -> UnitOfWork:
    if settings.storage == "memory":
        log.info("using in-memory storage")
        return InMemoryUnitOfWork(InMemoryStore(currency=settings.currency))

    engine = create_pharmacy_engine(settings.database_url, echo=settings.sql_echo)
    create_schema(engine)
    return SqlUnitOfWork(engine, currency=settings.currency)


def build_usecases(
    settings: Settings | None = None,
    uow: UnitOfWork | None = None,
    events: EventPublisher | None = None,
) -> UseCases:
    settings = settings or Settings()
    uow = uow or build_unit_of_work(settings)
    events = events or LoggingEventPublisher()

    return UseCases(
        place_order=PlaceOrderService(
            PlaceOrderDeps(uow=uow, events=events, currency=settings.currency)
        ),
        get_order=GetOrderService(GetOrderDeps(uow=uow)),
        list_orders=ListOrdersService(ListOrdersDeps(uow=uow)),
        catalog=CatalogService(CatalogDeps(uow=uow, currency=settings.currency)),
    )
