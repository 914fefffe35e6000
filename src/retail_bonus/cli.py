"""
Command-line interface for the bonus engine.

Evaluates basket snapshots stored as JSON files, as returned by the commerce API.

Usage:
    retail-bonus summarize --basket basket.json --promotions products.json
    retail-bonus summarize --basket basket.json --promotions products.json --rule-map rules.json
    retail-bonus plan --basket basket.json --promotion-id promo-1 --product-id tie-1 --quantity 2
"""

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Sequence

from pydantic import BaseModel

from retail_bonus import __version__
from retail_bonus.config.settings import load_config_with_fallback
from retail_bonus.promotions import (
    BonusSelection,
    group_cart_items,
    load_basket,
    load_promotion_lookup,
    plan_bonus_additions,
)
from retail_bonus.shared.exceptions import RetailBonusException
from retail_bonus.shared.logging_config import configure_structured_logging
from retail_bonus.shared.logging_utils import get_structured_logger

EXIT_OK = 0
EXIT_LOAD_ERROR = 2

log = get_structured_logger(__name__)


def read_json(path: Path) -> Any:
    """Read a JSON document from disk."""
    with path.open("r") as f:
        return json.load(f)


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_json(data: Any) -> str:
    """Render results (dataclasses and wire models) as JSON."""
    return json.dumps(data, default=_json_default, indent=2)


def cmd_summarize(args: argparse.Namespace) -> int:
    """
    Print every purchased line grouped with its allocated bonus products.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    basket = load_basket(read_json(args.basket))
    lookup = load_promotion_lookup(read_json(args.promotions))
    rule_map = read_json(args.rule_map) if args.rule_map else None

    with log.evaluation(basket_id=basket.basket_id):
        groups = group_cart_items(basket, lookup, rule_map)
        log.info(
            "Summarized basket",
            purchased_lines=len(groups),
            bonus_lines=len(basket.bonus_lines()),
        )

    print(dump_json([asdict(group) for group in groups]))
    return EXIT_OK


def cmd_plan(args: argparse.Namespace) -> int:
    """
    Print the basket additions needed to add a bonus product.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    basket = load_basket(read_json(args.basket))
    selection = BonusSelection(
        product_id=args.product_id, quantity=args.quantity, price=args.price
    )

    with log.evaluation(basket_id=basket.basket_id):
        requests = plan_bonus_additions(basket, args.promotion_id, [selection])
        log.info(
            "Planned bonus additions",
            promotion_id=args.promotion_id,
            product_id=args.product_id,
            requests=len(requests),
        )

    print(dump_json([request.to_payload() for request in requests]))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Bonus-product allocation for storefront baskets",
        prog="retail-bonus",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a bonus_config.json file (default: environment, then bonus_config.json)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # ===== SUMMARIZE SUBCOMMAND =====
    summarize_parser = subparsers.add_parser(
        "summarize",
        help="Group purchased lines with their allocated bonus products",
    )
    summarize_parser.add_argument(
        "--basket", type=Path, required=True, help="Basket snapshot JSON"
    )
    summarize_parser.add_argument(
        "--promotions",
        type=Path,
        required=True,
        help="JSON object mapping productId to product data with productPromotions",
    )
    summarize_parser.add_argument(
        "--rule-map",
        type=Path,
        help="JSON object mapping rule-based promotionId to qualifying productIds",
    )

    # ===== PLAN SUBCOMMAND =====
    plan_parser = subparsers.add_parser(
        "plan",
        help="Plan basket additions for a bonus product selection",
    )
    plan_parser.add_argument(
        "--basket", type=Path, required=True, help="Basket snapshot JSON"
    )
    plan_parser.add_argument("--promotion-id", required=True, help="Bonus promotion ID")
    plan_parser.add_argument("--product-id", required=True, help="Bonus product to add")
    plan_parser.add_argument(
        "--quantity", type=int, default=1, help="Units to add (default: 1)"
    )
    plan_parser.add_argument("--price", type=float, help="Price to send with the request")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main CLI entry point - routes to subcommands.

    Returns:
        Exit code (0 for success, 2 when an input cannot be loaded)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = load_config_with_fallback(args.config)
    except (RetailBonusException, FileNotFoundError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR
    configure_structured_logging(args.log_level or config.logging.level)

    commands = {"summarize": cmd_summarize, "plan": cmd_plan}
    try:
        return commands[args.command](args)
    except (RetailBonusException, FileNotFoundError, json.JSONDecodeError) as e:
        log.error("Failed to load input", command=args.command, error=str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_LOAD_ERROR


if __name__ == "__main__":
    sys.exit(main())
