from __future__ import annotations


class CheckoutCoreError(Exception):
    pass


class InvalidQuantity(CheckoutCoreError, ValueError):
    def __init__(self, quantity: object):
        super().__init__(f"Quantity must be a positive integer, got {quantity!r}")
        self.quantity = quantity


class ProductNotFound(CheckoutCoreError, LookupError):
    def __init__(self, sku: str):
        super().__init__(f"Product not found: {sku}")
        self.sku = sku


class CartCheckedOut(CheckoutCoreError):
    def __init__(self) -> None:
        super().__init__("Cart has already been checked out")


class InsufficientInventory(CheckoutCoreError):
    """
    Raised by the cart when the total it would hold for a SKU exceeds
    what the ledger currently reports as available.
    """

    def __init__(self, sku: str, requested: int, in_cart: int, available: int):
        super().__init__(
            f"Insufficient inventory for {sku}. "
            f"Requested: {requested}, Current in cart: {in_cart}, Available: {available}"
        )
        self.sku = sku
        self.requested = requested
        self.in_cart = in_cart
        self.available = available


def check_quantity(quantity: object) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidQuantity(quantity)
    return quantity
