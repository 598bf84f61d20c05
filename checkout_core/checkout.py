from __future__ import annotations

import copy
import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Sequence

from checkout_core.cart import InventoryCart
from checkout_core.discounts import DiscountEngine
from checkout_core.ledger import InventoryLedger
from checkout_core.models import CheckoutResult, CheckoutStage, FailureReason, LineItem, Order
from checkout_core.payments import PaymentGateway
from checkout_core.store import OrderRepository

logger = logging.getLogger(__name__)


def new_order_id() -> str:
    return f"ORDER-{uuid.uuid4().hex}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepFailed(Exception):
    def __init__(self, stage: CheckoutStage, reason: FailureReason, message: str):
        super().__init__(message)
        self.stage = stage
        self.reason = reason


class Step(ABC):
    def __init__(self, log: Callable[[str], None], checkout_id: str):
        self.log = log
        self.checkout_id = checkout_id

    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def execute(self) -> None: ...

    @abstractmethod
    def compensate(self) -> None: ...

    def run(self) -> None:
        self.log(f"[checkout={self.checkout_id}] STEP {self.name()}")
        self.execute()
        self.log(f"[checkout={self.checkout_id}] STEP {self.name()} OK")

    def run_compensation(self) -> None:
        self.log(f"[checkout={self.checkout_id}] COMPENSATE {self.name()}")
        self.compensate()
        self.log(f"[checkout={self.checkout_id}] COMPENSATE {self.name()} OK")


class ReserveStock(Step):
    """
    Reserves every line against the ledger.

    All or nothing: if one line cannot be reserved, the lines already taken
    by this step are released before it fails, so a failed step never
    leaves anything to compensate.
    """

    def __init__(self, log: Callable[[str], None], checkout_id: str, ledger: InventoryLedger, items: Sequence[LineItem]):
        super().__init__(log, checkout_id)
        self.ledger = ledger
        self.items = list(items)
        self.reserved: List[LineItem] = []

    def name(self) -> str:
        return "ReserveStock"

    def execute(self) -> None:
        try:
            for item in self.items:
                if not self.ledger.reserve(item.sku, item.quantity):
                    available = self.ledger.available_quantity(item.sku)
                    raise StepFailed(
                        CheckoutStage.VALIDATING,
                        FailureReason.INVENTORY_UNAVAILABLE,
                        f"Inventory no longer available for {item.sku} "
                        f"(requested {item.quantity}, in cart {item.quantity}, available {available})",
                    )
                self.reserved.append(item)
                self.log(f"[checkout={self.checkout_id}] stock reserved: {item.sku} qty={item.quantity}")
        except Exception:
            self._release_reserved()
            raise

    def compensate(self) -> None:
        self._release_reserved()

    def _release_reserved(self) -> None:
        while self.reserved:
            item = self.reserved.pop()
            self.ledger.release(item.sku, item.quantity)
            self.log(f"[checkout={self.checkout_id}] stock released: {item.sku} qty={item.quantity}")


class ChargePayment(Step):
    def __init__(self, log: Callable[[str], None], checkout_id: str, gateway: PaymentGateway, amount: Decimal, token: str):
        super().__init__(log, checkout_id)
        self.gateway = gateway
        self.amount = amount
        self.token = token

    def name(self) -> str:
        return "ChargePayment"

    def execute(self) -> None:
        if not self.gateway.charge(self.amount, self.token):
            raise StepFailed(CheckoutStage.CHARGING, FailureReason.PAYMENT_DECLINED, "Payment declined")
        self.log(f"[checkout={self.checkout_id}] charged amount={self.amount}")

    def compensate(self) -> None:
        self.gateway.refund(self.amount, self.token)
        self.log(f"[checkout={self.checkout_id}] refunded amount={self.amount}")


class PersistOrder(Step):
    def __init__(self, log: Callable[[str], None], checkout_id: str, repository: OrderRepository, order: Order):
        super().__init__(log, checkout_id)
        self.repository = repository
        self.order = order

    def name(self) -> str:
        return "PersistOrder"

    def execute(self) -> None:
        try:
            self.repository.save(self.order)
        except Exception as e:
            raise StepFailed(
                CheckoutStage.PERSISTING,
                FailureReason.ORDER_NOT_SAVED,
                f"Order could not be saved: {e}",
            ) from e

    def compensate(self) -> None:
        # Last step: once it succeeds nothing runs after it that could fail.
        self.log(f"[checkout={self.checkout_id}] persist has no compensation")


class CheckoutService:
    """
    Drives one cart through validating, pricing, charging and persisting.

    Every outcome is returned as a CheckoutResult; no checkout failure is
    raised to the caller. On failure the completed steps are compensated in
    reverse order, so stock is released and charges are refunded before the
    result is returned.
    """

    def __init__(
        self,
        ledger: InventoryLedger,
        discounts: DiscountEngine,
        gateway: PaymentGateway,
        repository: OrderRepository,
        *,
        order_ids: Callable[[], str] = new_order_id,
        clock: Callable[[], datetime] = utcnow,
        log: Optional[Callable[[str], None]] = None,
    ):
        self.ledger = ledger
        self.discounts = discounts
        self.gateway = gateway
        self.repository = repository
        self.order_ids = order_ids
        self.clock = clock
        self.log = log or logger.info

    def checkout(self, cart: InventoryCart, payment_token: str) -> CheckoutResult:
        checkout_id = self.order_ids()
        items = cart.line_items()
        self.log(f"[checkout={checkout_id}] CHECKOUT START lines={len(items)}")

        if cart.checked_out:
            self.log(f"[checkout={checkout_id}] CHECKOUT FAILED: cart already checked out")
            return CheckoutResult.failed(
                CheckoutStage.VALIDATING, FailureReason.ALREADY_CHECKED_OUT, "Cart has already been checked out"
            )

        if not items:
            self.log(f"[checkout={checkout_id}] CHECKOUT FAILED: cart is empty")
            return CheckoutResult.failed(CheckoutStage.VALIDATING, FailureReason.EMPTY_CART, "Cart is empty")

        completed: List[Step] = []
        stage = CheckoutStage.VALIDATING
        try:
            self._run(ReserveStock(self.log, checkout_id, self.ledger, items), completed)

            stage = CheckoutStage.PRICING
            subtotal = cart.total()
            total_discount = self.discounts.total_discount(items)
            final_amount = subtotal - total_discount
            self.log(
                f"[checkout={checkout_id}] amounts: subtotal={subtotal} discount={total_discount} final={final_amount}"
            )

            stage = CheckoutStage.CHARGING
            self._run(ChargePayment(self.log, checkout_id, self.gateway, final_amount, payment_token), completed)

            stage = CheckoutStage.PERSISTING
            order = Order(
                order_id=checkout_id,
                line_items=tuple(copy.deepcopy(items)),
                subtotal=subtotal,
                total_discount=total_discount,
                final_amount=final_amount,
                created_at=self.clock(),
            )
            self._run(PersistOrder(self.log, checkout_id, self.repository, order), completed)
        except StepFailed as e:
            self.log(f"[checkout={checkout_id}] CHECKOUT FAILED: {e}")
            self._compensate(checkout_id, completed)
            return CheckoutResult.failed(e.stage, e.reason, str(e))
        except Exception as e:
            logger.exception("checkout %s failed during %s", checkout_id, stage.value)
            self.log(f"[checkout={checkout_id}] CHECKOUT FAILED: {e}")
            self._compensate(checkout_id, completed)
            return CheckoutResult.failed(
                stage, FailureReason.UNEXPECTED_ERROR, f"Checkout failed during {stage.value}: {e}"
            )

        cart.mark_checked_out()
        self.log(f"[checkout={checkout_id}] CHECKOUT OK")
        return CheckoutResult.completed(order)

    @staticmethod
    def _run(step: Step, completed: List[Step]) -> None:
        step.run()
        completed.append(step)

    def _compensate(self, checkout_id: str, completed: List[Step]) -> None:
        for step in reversed(completed):
            try:
                step.run_compensation()
            except Exception as comp_exc:
                logger.exception("compensation of %s failed for checkout %s", step.name(), checkout_id)
                self.log(f"[checkout={checkout_id}] COMPENSATION FAILED at {step.name()}: {comp_exc}")
        self.log(f"[checkout={checkout_id}] CHECKOUT END (failed)")
