from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import ORDER_DAY
from pharmacy.core.domain.model.errors import ValidationError
from pharmacy.core.domain.model.order import (
    ClientId,
    MedicineId,
    Money,
    Order,
    OrderId,
    OrderLine,
    fold_money,
)


def test_money_rounds_to_cents():
    assert Money.of("1.005").amount == Decimal("1.01")
    assert Money.of(3).amount == Decimal("3.00")


def test_money_refuses_mixed_currencies():
    with pytest.raises(ValueError):
        Money.of("1.00", "EUR") + Money.of("1.00", "USD")


def test_line_subtotal_uses_captured_price():
    line = OrderLine(MedicineId(1), 3, Money.of("0.35"))

    assert line.subtotal() == Money.of("1.05")


@pytest.mark.parametrize(
    "medicine_id, quantity, price",
    [(0, 1, "1.00"), (1, 0, "1.00"), (1, 1, "0.00")],
)
def test_invalid_line_is_rejected(medicine_id, quantity, price):
    with pytest.raises(ValidationError):
        OrderLine(MedicineId(medicine_id), quantity, Money.of(price))


def test_order_total_matches_its_lines():
    lines = (
        OrderLine(MedicineId(1), 2, Money.of("2.00")),
        OrderLine(MedicineId(2), 3, Money.of("1.50")),
    )
    order = Order(OrderId(1), ClientId(1), ORDER_DAY, Money.of("8.50"), lines)

    assert fold_money(ln.subtotal() for ln in order.lines) == order.total
    assert fold_money([]) == Money.zero()


def test_order_needs_a_stored_client():
    with pytest.raises(ValidationError):
        Order(OrderId(1), ClientId(0), ORDER_DAY, Money.zero())
