"""
Cart command-line tool.

Runs one cart operation against the configured API and storage, then prints
the cart.

Usage:
    python -m cartstore show
    python -m cartstore add 7
    python -m cartstore update 7 3
    python -m cartstore remove 7
    python -m cartstore --env-file .env.local add 7
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from .config import load_settings
from .errors import ConfigError
from .logging import configure_logging
from .models import Cart
from .money import format_money
from .notifier import CallbackNotifier
from .store import CartResult, CartStore, create_cart_store


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cartstore", description="Inspect and modify the persisted cart")
    parser.add_argument("--env-file", help="Load settings from this .env file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("show", help="Print the cart")

    add = subparsers.add_parser("add", help="Add one unit of a product")
    add.add_argument("product_id", type=int)

    remove = subparsers.add_parser("remove", help="Remove a product from the cart")
    remove.add_argument("product_id", type=int)

    update = subparsers.add_parser("update", help="Set the amount of a product in the cart")
    update.add_argument("product_id", type=int)
    update.add_argument("amount", type=int)

    return parser


def format_cart(cart: Cart) -> str:
    """Render the cart as a plain-text table."""
    if not cart:
        return "Cart is empty"

    lines = [f"{'ID':>6}  {'PRODUCT':<30} {'PRICE':>12} {'QTY':>5} {'SUBTOTAL':>12}"]
    for item in cart:
        lines.append(
            f"{item.id:>6}  {item.name[:30]:<30} {format_money(item.price):>12} "
            f"{item.amount:>5} {format_money(item.subtotal):>12}"
        )
    lines.append(f"Items: {cart.total_items}  Total: {format_money(cart.subtotal)}")
    return "\n".join(lines)


async def run_command(store: CartStore, args: argparse.Namespace) -> Optional[CartResult]:
    try:
        if args.command == "add":
            return await store.add_product(args.product_id)
        if args.command == "remove":
            return await store.remove_product(args.product_id)
        if args.command == "update":
            return await store.update_product_amount(args.product_id, args.amount)
        return None
    finally:
        await store.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.env_file)
        configure_logging(settings.log_level)
        store = create_cart_store(
            settings,
            notifier=CallbackNotifier(lambda message: print(f"ERROR: {message}", file=sys.stderr)),
        )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    result = asyncio.run(run_command(store, args))
    print(format_cart(store.get_cart()))
    return 0 if result is None or result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
