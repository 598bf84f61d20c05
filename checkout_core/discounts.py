from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from checkout_core.models import LineItem, to_money

ZERO = Decimal("0.00")


@dataclass(slots=True, frozen=True)
class DiscountPolicy:
    """
    Thresholds and rates for the two discount passes.

    Both thresholds are inclusive: a line of exactly `bulk_quantity` units
    gets the bulk rate, and a post-bulk total of exactly `order_threshold`
    gets the order rate.
    """

    bulk_quantity: int = 10
    bulk_rate: Decimal = Decimal("0.10")
    order_threshold: Decimal = Decimal("1000")
    order_rate: Decimal = Decimal("0.05")

    def __post_init__(self) -> None:
        if self.bulk_quantity < 0:
            raise ValueError(f"bulk_quantity must be >= 0, got {self.bulk_quantity}")
        if self.order_threshold < 0:
            raise ValueError(f"order_threshold must be >= 0, got {self.order_threshold}")
        for name in ("bulk_rate", "order_rate"):
            rate = getattr(self, name)
            if not Decimal("0") <= rate <= Decimal("1"):
                raise ValueError(f"{name} must be within [0, 1], got {rate}")


@dataclass(slots=True, frozen=True)
class Quote:
    subtotal: Decimal
    bulk_discount: Decimal
    order_discount: Decimal

    @property
    def total_discount(self) -> Decimal:
        return self.bulk_discount + self.order_discount

    @property
    def final_amount(self) -> Decimal:
        return self.subtotal - self.total_discount


class DiscountEngine:
    """
    Stateless discount calculation in two ordered passes.

    The bulk pass runs per line. The order pass runs once, on the total
    left after bulk discounts, so the same amount is never discounted twice
    on the raw subtotal.
    """

    def __init__(self, policy: DiscountPolicy | None = None):
        self.policy = policy or DiscountPolicy()

    def bulk_discount(self, item: LineItem) -> Decimal:
        if item.quantity >= self.policy.bulk_quantity:
            return to_money(item.subtotal * self.policy.bulk_rate)
        return ZERO

    def bulk_discount_total(self, items: Iterable[LineItem]) -> Decimal:
        return sum((self.bulk_discount(item) for item in items), ZERO)

    def subtotal_after_bulk(self, items: Iterable[LineItem]) -> Decimal:
        return sum((item.subtotal - self.bulk_discount(item) for item in items), ZERO)

    def order_discount(self, reduced_total: Decimal) -> Decimal:
        if reduced_total >= self.policy.order_threshold:
            return to_money(reduced_total * self.policy.order_rate)
        return ZERO

    def total_discount(self, items: Iterable[LineItem]) -> Decimal:
        items = list(items)
        return self.bulk_discount_total(items) + self.order_discount(self.subtotal_after_bulk(items))

    def quote(self, items: Iterable[LineItem]) -> Quote:
        items = list(items)
        return Quote(
            subtotal=sum((item.subtotal for item in items), ZERO),
            bulk_discount=self.bulk_discount_total(items),
            order_discount=self.order_discount(self.subtotal_after_bulk(items)),
        )
