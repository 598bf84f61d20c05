"""Tests for the two-pass discount engine."""
from decimal import Decimal

import pytest

from checkout_core.discounts import DiscountEngine, DiscountPolicy
from checkout_core.models import LineItem, Product

EXPENSIVE = Product(sku="EXPENSIVE", name="Expensive Item", price=Decimal("100"))
CHEAP = Product(sku="CHEAP", name="Cheap Item", price=Decimal("50"))


def test_no_bulk_discount_below_threshold(engine):
    assert engine.bulk_discount(LineItem(EXPENSIVE, 9)) == Decimal("0")


def test_bulk_discount_at_threshold(engine):
    assert engine.bulk_discount(LineItem(EXPENSIVE, 10)) == Decimal("100.00")


def test_bulk_discount_above_threshold(engine):
    assert engine.bulk_discount(LineItem(CHEAP, 15)) == Decimal("75.00")


def test_no_order_discount_below_threshold(engine):
    items = [LineItem(EXPENSIVE, 5), LineItem(CHEAP, 8)]  # 900

    assert engine.total_discount(items) == Decimal("0")


def test_order_discount_on_1050(engine):
    items = [LineItem(EXPENSIVE, 8), LineItem(CHEAP, 5)]  # 1050, no bulk lines

    assert engine.order_discount(engine.subtotal_after_bulk(items)) == Decimal("52.50")
    assert engine.total_discount(items) == Decimal("52.50")


def test_order_discount_at_exactly_1000(engine):
    items = [LineItem(EXPENSIVE, 8), LineItem(CHEAP, 4)]  # 1000, no bulk lines

    assert engine.order_discount(Decimal("1000")) == Decimal("50.00")
    assert engine.total_discount(items) == Decimal("50.00")


def test_order_discount_uses_post_bulk_total(engine):
    bulk_item = LineItem(EXPENSIVE, 12)  # 1200, bulk 120
    regular_item = LineItem(CHEAP, 2)  # 100
    items = [bulk_item, regular_item]

    assert engine.bulk_discount_total(items) == Decimal("120.00")
    assert engine.subtotal_after_bulk(items) == Decimal("1180.00")
    assert engine.order_discount(engine.subtotal_after_bulk(items)) == Decimal("59.00")
    # 5% of the raw 1300 would be 65.00
    assert engine.total_discount(items) == Decimal("179.00")


def test_bulk_discount_can_drop_total_below_order_threshold(engine):
    items = [LineItem(EXPENSIVE, 10)]  # raw 1000, post-bulk 900

    assert engine.total_discount(items) == Decimal("100.00")


def test_empty_items_have_no_discount(engine):
    quote = engine.quote([])

    assert quote.subtotal == 0
    assert quote.bulk_discount == 0
    assert quote.order_discount == 0
    assert quote.total_discount == 0
    assert engine.total_discount([]) == 0


def test_quote_breakdown(engine):
    quote = engine.quote([LineItem(EXPENSIVE, 12), LineItem(CHEAP, 2)])

    assert quote.subtotal == Decimal("1300")
    assert quote.bulk_discount == Decimal("120.00")
    assert quote.order_discount == Decimal("59.00")
    assert quote.total_discount == Decimal("179.00")
    assert quote.final_amount == Decimal("1121.00")


def test_discounts_are_rounded_to_cents(engine):
    odd = Product(sku="ODD", name="Odd", price=Decimal("0.99"))

    assert engine.bulk_discount(LineItem(odd, 11)) == Decimal("1.09")  # 10% of 10.89


def test_custom_policy():
    engine = DiscountEngine(
        DiscountPolicy(bulk_quantity=5, bulk_rate=Decimal("0.20"), order_threshold=Decimal("300"), order_rate=Decimal("0.10"))
    )
    items = [LineItem(CHEAP, 5), LineItem(EXPENSIVE, 1)]  # 250 bulk 50 -> 200 + 100 = 300

    assert engine.total_discount(items) == Decimal("80.00")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"bulk_rate": Decimal("1.5")},
        {"order_rate": Decimal("-0.1")},
        {"bulk_quantity": -1},
        {"order_threshold": Decimal("-1")},
    ],
)
def test_policy_validation(kwargs):
    with pytest.raises(ValueError):
        DiscountPolicy(**kwargs)
