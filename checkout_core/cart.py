from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List

from checkout_core.errors import CartCheckedOut, InsufficientInventory, InvalidQuantity, ProductNotFound, check_quantity
from checkout_core.ledger import InventoryLedger
from checkout_core.models import LineItem
from checkout_core.store import ProductCatalog

logger = logging.getLogger(__name__)


class InventoryCart:
    """
    Cart that admits quantities only while the ledger shows enough stock.

    Admission is advisory: the cart reads the ledger but never reserves,
    so stock can still be taken by someone else before checkout. The
    checkout service reserves for real when it validates.
    """

    def __init__(self, catalog: ProductCatalog, ledger: InventoryLedger):
        self.catalog = catalog
        self.ledger = ledger
        self._items: Dict[str, LineItem] = {}
        self.checked_out = False

    def add_item(self, sku: str, qty: int) -> None:
        self._ensure_open()
        check_quantity(qty)
        product = self.catalog.find_product(sku)
        if product is None:
            raise ProductNotFound(sku)

        in_cart = self.quantity_of(sku)
        available = self.ledger.available_quantity(sku)
        if in_cart + qty > available:
            raise InsufficientInventory(sku=sku, requested=qty, in_cart=in_cart, available=available)

        existing = self._items.get(sku)
        if existing is not None:
            self._items[sku] = existing.with_quantity(in_cart + qty)
        else:
            self._items[sku] = LineItem(product=product, quantity=qty)
        logger.debug("cart add: %s qty=%s (in_cart=%s, available=%s)", sku, qty, in_cart + qty, available)

    def update_quantity(self, sku: str, qty: int) -> None:
        self._ensure_open()
        if isinstance(qty, bool) or not isinstance(qty, int):
            raise InvalidQuantity(qty)
        if qty <= 0:
            self.remove_item(sku)
            return
        existing = self._items.get(sku)
        if existing is None:
            return
        available = self.ledger.available_quantity(sku)
        if qty > available:
            raise InsufficientInventory(
                sku=sku,
                requested=qty - existing.quantity,
                in_cart=existing.quantity,
                available=available,
            )
        self._items[sku] = existing.with_quantity(qty)

    def remove_item(self, sku: str) -> None:
        self._ensure_open()
        self._items.pop(sku, None)

    def mark_checked_out(self) -> None:
        self.checked_out = True

    def _ensure_open(self) -> None:
        if self.checked_out:
            raise CartCheckedOut()

    def quantity_of(self, sku: str) -> int:
        item = self._items.get(sku)
        return item.quantity if item else 0

    def total(self) -> Decimal:
        return sum((item.subtotal for item in self._items.values()), Decimal("0"))

    def line_items(self) -> List[LineItem]:
        return list(self._items.values())

    @property
    def items(self) -> Dict[str, LineItem]:
        return dict(self._items)

    @property
    def item_count(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items
