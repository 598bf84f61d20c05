from __future__ import annotations

import logging
import threading
from typing import Dict

from checkout_core.errors import check_quantity

logger = logging.getLogger(__name__)


class InventoryLedger:
    """
    Available stock per SKU, shared by every cart and checkout in the process.

    Each SKU has its own lock, so reservations for different products never
    contend. The registry lock is only held while a missing per-SKU lock is
    created.

    Reads do not lock: a single dict lookup always returns a value that some
    completed mutation wrote for that SKU.
    """

    def __init__(self) -> None:
        self._available: Dict[str, int] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, sku: str) -> threading.Lock:
        lock = self._locks.get(sku)
        if lock is None:
            with self._registry_lock:
                lock = self._locks.setdefault(sku, threading.Lock())
        return lock

    def available_quantity(self, sku: str) -> int:
        return self._available.get(sku, 0)

    def add_stock(self, sku: str, qty: int) -> None:
        check_quantity(qty)
        with self._lock_for(sku):
            self._available[sku] = self._available.get(sku, 0) + qty
            logger.debug("stock added: %s qty=%s (available=%s)", sku, qty, self._available[sku])

    def reserve(self, sku: str, qty: int) -> bool:
        check_quantity(qty)
        with self._lock_for(sku):
            available = self._available.get(sku, 0)
            if available < qty:
                logger.debug("reserve refused: %s qty=%s (available=%s)", sku, qty, available)
                return False
            self._available[sku] = available - qty
            logger.debug("reserved: %s qty=%s (available=%s)", sku, qty, self._available[sku])
            return True

    def release(self, sku: str, qty: int) -> None:
        check_quantity(qty)
        with self._lock_for(sku):
            self._available[sku] = self._available.get(sku, 0) + qty
            logger.debug("released: %s qty=%s (available=%s)", sku, qty, self._available[sku])

    def snapshot(self) -> Dict[str, int]:
        return dict(self._available)
