from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from checkout_core.errors import check_quantity

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT)


@dataclass(slots=True, frozen=True)
class Product:
    sku: str
    name: str
    price: Decimal

    def __post_init__(self) -> None:
        sku = (self.sku or "").strip()
        name = (self.name or "").strip()
        if not sku:
            raise ValueError("SKU cannot be empty")
        if not name:
            raise ValueError("Name cannot be empty")
        price = Decimal(str(self.price)) if not isinstance(self.price, Decimal) else self.price
        if price < 0:
            raise ValueError(f"Price cannot be negative: {price}")
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "sku", sku)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "price", price)


@dataclass(slots=True, frozen=True)
class LineItem:
    product: Product
    quantity: int

    def __post_init__(self) -> None:
        if self.product is None:
            raise ValueError("Product cannot be None")
        check_quantity(self.quantity)

    @property
    def sku(self) -> str:
        return self.product.sku

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity

    def with_quantity(self, quantity: int) -> LineItem:
        return LineItem(product=self.product, quantity=quantity)


class CheckoutStage(str, Enum):
    VALIDATING = "validating"
    PRICING = "pricing"
    CHARGING = "charging"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


class FailureReason(str, Enum):
    EMPTY_CART = "empty_cart"
    ALREADY_CHECKED_OUT = "already_checked_out"
    INVENTORY_UNAVAILABLE = "inventory_unavailable"
    PAYMENT_DECLINED = "payment_declined"
    ORDER_NOT_SAVED = "order_not_saved"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(slots=True, frozen=True)
class Order:
    """
    Snapshot of a successful checkout, taken at charge time.

    Built only by the checkout service and never mutated afterwards.
    """

    order_id: str
    line_items: Tuple[LineItem, ...]
    subtotal: Decimal
    total_discount: Decimal
    final_amount: Decimal
    created_at: datetime

    def __post_init__(self) -> None:
        if self.total_discount < 0:
            raise ValueError(f"total_discount must be >= 0, got {self.total_discount}")
        if self.final_amount < 0:
            raise ValueError(f"final_amount must be >= 0, got {self.final_amount}")
        if self.final_amount != self.subtotal - self.total_discount:
            raise ValueError(
                f"final_amount {self.final_amount} != subtotal {self.subtotal} - discount {self.total_discount}"
            )


@dataclass(slots=True, frozen=True)
class CheckoutResult:
    """
    Outcome of one checkout.

    `stage` is COMPLETED or FAILED; for failures `failed_at` names the
    stage that stopped the pipeline and `reason` says why.
    """

    success: bool
    message: str
    stage: CheckoutStage
    order: Optional[Order] = None
    reason: Optional[FailureReason] = None
    failed_at: Optional[CheckoutStage] = None

    def __post_init__(self) -> None:
        if self.success and (self.order is None or self.reason is not None):
            raise ValueError("successful result must carry an order and no failure reason")
        if not self.success and (self.order is not None or self.reason is None):
            raise ValueError("failed result must carry a failure reason and no order")

    @classmethod
    def completed(cls, order: Order) -> CheckoutResult:
        return cls(success=True, message="Order processed successfully", stage=CheckoutStage.COMPLETED, order=order)

    @classmethod
    def failed(cls, failed_at: CheckoutStage, reason: FailureReason, message: str) -> CheckoutResult:
        return cls(
            success=False,
            message=message,
            stage=CheckoutStage.FAILED,
            reason=reason,
            failed_at=failed_at,
        )
