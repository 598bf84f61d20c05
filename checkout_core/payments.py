from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Protocol

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    def charge(self, amount: Decimal, token: str) -> bool: ...

    def refund(self, amount: Decimal, token: str) -> None: ...


@dataclass(slots=True, frozen=True)
class PaymentRecord:
    amount: Decimal
    token: str


class InMemoryPaymentGateway:
    """
    Gateway stand-in that captures every charge unless the token is listed
    as declined. Charges and refunds are recorded for inspection.
    """

    def __init__(self, declined_tokens: Iterable[str] = ()):
        self.declined_tokens = set(declined_tokens)
        self.charges: List[PaymentRecord] = []
        self.refunds: List[PaymentRecord] = []
        self.declines: List[PaymentRecord] = []
        self._lock = threading.Lock()

    def charge(self, amount: Decimal, token: str) -> bool:
        if amount < 0:
            raise ValueError(f"Cannot charge a negative amount: {amount}")
        record = PaymentRecord(amount=amount, token=token)
        with self._lock:
            if token in self.declined_tokens:
                self.declines.append(record)
                logger.info("payment declined: token=%s amount=%s", token, amount)
                return False
            self.charges.append(record)
        logger.info("payment captured: token=%s amount=%s", token, amount)
        return True

    def refund(self, amount: Decimal, token: str) -> None:
        if amount < 0:
            raise ValueError(f"Cannot refund a negative amount: {amount}")
        with self._lock:
            self.refunds.append(PaymentRecord(amount=amount, token=token))
        logger.info("payment refunded: token=%s amount=%s", token, amount)
