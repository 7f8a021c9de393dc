from __future__ import annotations

from decimal import Decimal

from returns.result import Success
from sqlalchemy import inspect

from conftest import order_count, stock_of
from pharmacy.adapters.outbound.sql.engine import create_pharmacy_engine
from pharmacy.adapters.outbound.sql.schema import DETAILED_ORDER_SUMMARY, create_schema
from pharmacy.core.domain.model.errors import ErrorKind
from pharmacy.core.domain.model.order import Money
from pharmacy.core.ports.inbound.catalog import AddressInput, NewClient
from pharmacy.core.ports.inbound.get_order import GetOrderQuery
from pharmacy.core.ports.inbound.list_orders import ListOrdersQuery
from pharmacy.core.ports.inbound.place_order import PlaceOrderCommand


def place(usecases, client_id, quantities):
    return usecases.place_order.place_order(
        PlaceOrderCommand.from_mapping(client_id, quantities)
    ).unwrap()


def test_get_unknown_order_is_not_found(usecases, seeded):
    result = usecases.get_order.get_order(GetOrderQuery(12345))

    assert result.failure().kind is ErrorKind.NOT_FOUND


def test_get_order_rejects_non_positive_id(usecases):
    assert usecases.get_order.get_order(GetOrderQuery(0)).failure().kind is ErrorKind.VALIDATION


def test_list_orders_filters_by_client(usecases, seeded):
    other = usecases.catalog.add_client(
        NewClient("Jonas", "Jonaitis", AddressInput("Lithuania", "Kaunas", "Laisvės al. 10", "44280"))
    ).unwrap()
    mine = place(usecases, seeded.client_id, {seeded.medicine_a: 1})
    theirs = place(usecases, other.value, {seeded.medicine_b: 1})

    all_orders = usecases.list_orders.list_orders(ListOrdersQuery()).unwrap()
    only_mine = usecases.list_orders.list_orders(ListOrdersQuery(seeded.client_id)).unwrap()

    assert {o.order_id for o in all_orders} == {mine.order_id, theirs.order_id}
    assert [o.order_id for o in only_mine] == [mine.order_id]
    assert only_mine[0].total == Money.of("2.00")


def test_list_orders_rejects_non_positive_client(usecases):
    result = usecases.list_orders.list_orders(ListOrdersQuery(client_id=-1))

    assert result.failure().kind is ErrorKind.VALIDATION


def test_detailed_summaries_count_items(usecases, seeded):
    receipt = place(usecases, seeded.client_id, {seeded.medicine_a: 4, seeded.medicine_b: 2})

    summaries = usecases.list_orders.detailed_summaries().unwrap()

    assert len(summaries) == 1
    s = summaries[0]
    assert s.order_id == receipt.order_id
    assert (s.client_first_name, s.client_last_name) == ("Ona", "Petraitytė")
    assert s.total.amount == Decimal("11.00")
    assert s.total_items_count == 6


def test_delete_order_keeps_stock_taken(uow, usecases, seeded):
    receipt = place(usecases, seeded.client_id, {seeded.medicine_a: 3})

    assert isinstance(
        usecases.get_order.delete_order(GetOrderQuery(receipt.order_id.value)), Success
    )

    assert order_count(uow) == 0
    assert stock_of(uow, seeded.medicine_a) == 7
    again = usecases.get_order.delete_order(GetOrderQuery(receipt.order_id.value))
    assert again.failure().kind is ErrorKind.NOT_FOUND


def test_medicine_on_an_order_cannot_be_deleted(uow, usecases, seeded):
    place(usecases, seeded.client_id, {seeded.medicine_a: 1})

    result = usecases.catalog.delete_medicine(seeded.medicine_a)

    assert result.failure().kind is ErrorKind.INTEGRITY_CONFLICT
    assert stock_of(uow, seeded.medicine_a) == 9


def test_create_schema_is_idempotent(tmp_path):
    engine = create_pharmacy_engine(f"sqlite:///{tmp_path / 'pharmacy.db'}")
    create_schema(engine)
    create_schema(engine)

    inspector = inspect(engine)
    assert {"client", "medicine", "supplier", "suppliermedicine", "order", "orderitem"} <= set(
        inspector.get_table_names()
    )
    assert DETAILED_ORDER_SUMMARY in inspector.get_view_names()
