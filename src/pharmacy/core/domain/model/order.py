from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Tuple

from pharmacy.core.domain.model.errors import ValidationError

DEFAULT_CURRENCY = "EUR"
_CENT = Decimal("0.01")


@dataclass(frozen=True)
class OrderId:
    value: int


@dataclass(frozen=True)
class ClientId:
    value: int


@dataclass(frozen=True)
class MedicineId:
    value: int


@dataclass(frozen=True)
class SupplierId:
    value: int


@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    @staticmethod
    def of(amount: Decimal | int | float | str, currency: str = DEFAULT_CURRENCY) -> "Money":
        try:
            raw = Decimal(str(amount))
            if not raw.is_finite():
                raise InvalidOperation
            dec = raw.quantize(_CENT, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise ValidationError(f"amount {amount!r} is not a valid money value") from None
        return Money(dec, currency)

    @staticmethod
    def zero(currency: str = DEFAULT_CURRENCY) -> "Money":
        return Money.of(0, currency)

    def __add__(self, other: "Money") -> "Money":
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, n: int) -> "Money":
        return Money(
            (self.amount * Decimal(n)).quantize(_CENT, rounding=ROUND_HALF_UP),
            self.currency,
        )

    def is_positive(self) -> bool:
        return self.amount > 0

    def _assert_same_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise ValueError(f"currency_mismatch: {self.currency} vs {other.currency}")


@dataclass(frozen=True)
class OrderLine:
    """One medicine on an order, priced at the moment the order was placed."""

    medicine_id: MedicineId
    quantity: int
    unit_price: Money

    def __post_init__(self) -> None:
        if self.medicine_id.value <= 0:
            raise ValidationError("medicine_id must be > 0")
        if self.quantity <= 0:
            raise ValidationError("quantity must be > 0")
        if not self.unit_price.is_positive():
            raise ValidationError("unit_price must be > 0")

    def subtotal(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Order:
    order_id: OrderId
    client_id: ClientId
    order_date: date
    total: Money
    lines: Tuple[OrderLine, ...] = ()

    def __post_init__(self) -> None:
        if self.order_id.value <= 0:
            raise ValidationError("order_id must be > 0")
        if self.client_id.value <= 0:
            raise ValidationError("client_id must be > 0")
        if self.total.amount < 0:
            raise ValidationError("total must not be negative")


@dataclass(frozen=True)
class OrderSummary:
    """A row of the detailed_order_summary view."""

    order_id: OrderId
    order_date: date
    client_first_name: str
    client_last_name: str
    total: Money
    total_items_count: int


def fold_money(values: Iterable[Money], currency: str = DEFAULT_CURRENCY) -> Money:
    total = Money.zero(currency)
    for v in values:
        total = total + v
    return total


def today() -> date:
    return date.today()
