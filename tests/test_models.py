"""Tests for the value types."""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from checkout_core.errors import InvalidQuantity
from checkout_core.models import CheckoutResult, CheckoutStage, FailureReason, LineItem, Order, Product


def test_product_trims_and_coerces_price():
    product = Product(sku="  SKU1 ", name=" Lamp ", price="12.50")

    assert product.sku == "SKU1"
    assert product.name == "Lamp"
    assert product.price == Decimal("12.50")


@pytest.mark.parametrize(
    "sku, name, price",
    [
        ("", "Lamp", Decimal("1")),
        ("   ", "Lamp", Decimal("1")),
        ("SKU1", "", Decimal("1")),
        ("SKU1", "Lamp", Decimal("-0.01")),
    ],
)
def test_product_rejects_invalid_fields(sku, name, price):
    with pytest.raises(ValueError):
        Product(sku=sku, name=name, price=price)


def test_product_is_immutable():
    product = Product(sku="SKU1", name="Lamp", price=Decimal("1"))

    with pytest.raises(AttributeError):
        product.price = Decimal("2")


def test_line_item_subtotal_and_with_quantity():
    product = Product(sku="SKU1", name="Lamp", price=Decimal("19.99"))
    item = LineItem(product=product, quantity=2)

    bigger = item.with_quantity(5)

    assert item.subtotal == Decimal("39.98")
    assert item.quantity == 2  # original untouched
    assert bigger.quantity == 5
    assert bigger.product is product
    assert bigger.subtotal == Decimal("99.95")


@pytest.mark.parametrize("qty", [0, -1, True, 1.5])
def test_line_item_rejects_non_positive_quantity(qty):
    product = Product(sku="SKU1", name="Lamp", price=Decimal("1"))

    with pytest.raises(InvalidQuantity):
        LineItem(product=product, quantity=qty)


def test_order_enforces_amount_invariant():
    with pytest.raises(ValueError):
        Order(
            order_id="ORDER-1",
            line_items=(),
            subtotal=Decimal("100"),
            total_discount=Decimal("10"),
            final_amount=Decimal("95"),
            created_at=datetime.now(timezone.utc),
        )


def test_checkout_result_order_present_iff_success():
    order = Order(
        order_id="ORDER-1",
        line_items=(),
        subtotal=Decimal("0"),
        total_discount=Decimal("0"),
        final_amount=Decimal("0"),
        created_at=datetime.now(timezone.utc),
    )

    ok = CheckoutResult.completed(order)
    failed = CheckoutResult.failed(CheckoutStage.CHARGING, FailureReason.PAYMENT_DECLINED, "Payment declined")

    assert ok.success and ok.order is order and ok.stage is CheckoutStage.COMPLETED
    assert not failed.success and failed.order is None
    assert failed.stage is CheckoutStage.FAILED
    assert failed.failed_at is CheckoutStage.CHARGING

    with pytest.raises(ValueError):
        CheckoutResult(success=False, message="x", stage=CheckoutStage.FAILED, order=order,
                       reason=FailureReason.PAYMENT_DECLINED)
    with pytest.raises(ValueError):
        CheckoutResult(success=True, message="x", stage=CheckoutStage.COMPLETED)
