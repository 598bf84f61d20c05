"""Pytest fixtures for the in-memory checkout core."""

from decimal import Decimal

import pytest

from checkout_core.cart import InventoryCart
from checkout_core.checkout import CheckoutService
from checkout_core.discounts import DiscountEngine
from checkout_core.store import Store


@pytest.fixture
def store() -> Store:
    store = Store(declined_tokens=("tok_declined",))

    store.add_product("SKU123", "Test Product", price=Decimal("100.00"), on_hand=10)
    store.add_product("SKU456", "Another Product", price=Decimal("50.00"), on_hand=20)
    store.add_product("CHEAP", "Cheap Product", price=Decimal("19.99"), on_hand=5)
    store.add_product("SOLDOUT", "Sold Out Product", price=Decimal("80.00"))  # no stock

    return store


@pytest.fixture
def cart(store: Store) -> InventoryCart:
    return InventoryCart(store.catalog, store.ledger)


@pytest.fixture
def engine() -> DiscountEngine:
    return DiscountEngine()


@pytest.fixture
def service(store: Store, engine: DiscountEngine) -> CheckoutService:
    return CheckoutService(store.ledger, engine, store.payments, store.orders, log=store.log)
