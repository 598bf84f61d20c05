from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Dict, List, Optional, Protocol

from checkout_core.ledger import InventoryLedger
from checkout_core.models import Order, Product
from checkout_core.payments import InMemoryPaymentGateway

logger = logging.getLogger(__name__)


class ProductCatalog(Protocol):
    def find_product(self, sku: str) -> Optional[Product]: ...


class OrderRepository(Protocol):
    def save(self, order: Order) -> None: ...

    def find_by_id(self, order_id: str) -> Optional[Order]: ...


class Catalog:
    def __init__(self) -> None:
        self._products: Dict[str, Product] = {}

    def add_product(self, product: Product) -> None:
        self._products[product.sku] = product

    def find_product(self, sku: str) -> Optional[Product]:
        return self._products.get(sku)

    def contains(self, sku: str) -> bool:
        return sku in self._products

    @property
    def product_count(self) -> int:
        return len(self._products)


class InMemoryOrderRepository:
    def __init__(self) -> None:
        self._orders: Dict[str, Order] = {}
        self._lock = threading.Lock()

    def save(self, order: Order) -> None:
        with self._lock:
            if order.order_id in self._orders:
                raise ValueError(f"Order {order.order_id} already saved")
            self._orders[order.order_id] = order

    def find_by_id(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def all(self) -> List[Order]:
        with self._lock:
            return list(self._orders.values())

    def __len__(self) -> int:
        return len(self._orders)


class Store:
    """
    In-memory wiring of everything a checkout touches.

    Holds:
    - the product catalog
    - the inventory ledger
    - saved orders
    - the payment gateway stand-in
    - a list of log lines (for the demo and for tests)
    """

    def __init__(self, declined_tokens: tuple[str, ...] = ()) -> None:
        self.catalog = Catalog()
        self.ledger = InventoryLedger()
        self.orders = InMemoryOrderRepository()
        self.payments = InMemoryPaymentGateway(declined_tokens=declined_tokens)

        self.logs: List[str] = []
        self._log_lock = threading.Lock()

    def log(self, message: str) -> None:
        with self._log_lock:
            self.logs.append(message)
        logger.info(message)

    # Seed helpers
    def add_product(self, sku: str, name: str, price: Decimal, on_hand: int = 0) -> Product:
        product = Product(sku=sku, name=name, price=price)
        self.catalog.add_product(product)
        if on_hand > 0:
            self.ledger.add_stock(product.sku, on_hand)
        return product
