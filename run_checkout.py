from __future__ import annotations

import argparse
import logging
from decimal import Decimal
from typing import Tuple

from checkout_core.cart import InventoryCart
from checkout_core.checkout import CheckoutService
from checkout_core.discounts import DiscountEngine, DiscountPolicy
from checkout_core.errors import CheckoutCoreError
from checkout_core.store import Store


def seed(store: Store) -> None:
    store.add_product("ITEM001", "Desk Lamp", price=Decimal("100.00"), on_hand=20)
    store.add_product("ITEM002", "Notebook", price=Decimal("50.00"), on_hand=5)
    store.add_product("ITEM003", "Backpack", price=Decimal("80.00"), on_hand=0)


def parse_item(value: str) -> Tuple[str, int]:
    sku, sep, qty = value.partition(":")
    if not sep or not sku:
        raise argparse.ArgumentTypeError(f"expected SKU:QTY, got {value!r}")
    try:
        return sku, int(qty)
    except ValueError:
        raise argparse.ArgumentTypeError(f"quantity must be an integer, got {qty!r}") from None


def main() -> None:
    defaults = DiscountPolicy()
    p = argparse.ArgumentParser(description="Fill a cart and run one checkout against a seeded in-memory store.")
    p.add_argument("--item", type=parse_item, action="append", default=None, help="SKU:QTY, may be repeated")
    p.add_argument("--token", type=str, default="tok_demo")
    p.add_argument("--decline", action="store_true", help="Make the gateway decline --token")
    p.add_argument("--bulk-quantity", type=int, default=defaults.bulk_quantity)
    p.add_argument("--bulk-rate", type=Decimal, default=defaults.bulk_rate)
    p.add_argument("--order-threshold", type=Decimal, default=defaults.order_threshold)
    p.add_argument("--order-rate", type=Decimal, default=defaults.order_rate)
    p.add_argument("--verbose", action="store_true", help="Also show ledger debug lines")
    args = p.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    store = Store(declined_tokens=(args.token,) if args.decline else ())
    seed(store)

    try:
        policy = DiscountPolicy(
            bulk_quantity=args.bulk_quantity,
            bulk_rate=args.bulk_rate,
            order_threshold=args.order_threshold,
            order_rate=args.order_rate,
        )
    except ValueError as e:
        p.error(str(e))
    service = CheckoutService(
        store.ledger,
        DiscountEngine(policy),
        store.payments,
        store.orders,
        log=store.log,
    )

    cart = InventoryCart(store.catalog, store.ledger)
    for sku, qty in args.item or [("ITEM001", 2)]:
        try:
            cart.add_item(sku, qty)
        except CheckoutCoreError as e:
            p.error(str(e))

    result = service.checkout(cart, args.token)

    print("\n=== RESULT ===")
    print("success:", result.success)
    print("message:", result.message)
    if result.order is not None:
        print("order:", result.order.order_id)
        print("subtotal:", result.order.subtotal)
        print("discount:", result.order.total_discount)
        print("final:", result.order.final_amount)
    print("stock:", store.ledger.snapshot())
    print("charges:", store.payments.charges)
    print("refunds:", store.payments.refunds)


if __name__ == "__main__":
    main()
