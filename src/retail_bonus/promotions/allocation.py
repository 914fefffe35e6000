"""
Cart-item bonus allocation.

Several purchased lines can qualify for the same promotion and therefore share
one pool of bonus units (two sizes of a suit, or a pickup and a delivery line
of the same product). The allocator splits that pool between them
deterministically:

1. Each qualifying line is entitled to
   ``floor(total_capacity / total_qualifying_quantity * line_quantity)`` units.
2. Lines on pickup shipments are served before delivery lines, then by cart
   position.
3. Bonus units are handed out one at a time from the front of the pool in the
   order they appear in the cart; the remainder of the floor stays unallocated.

A single qualifying line always receives every bonus unit of its promotions,
whatever the discount lines' caps say.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Iterable, Mapping

from retail_bonus.shared.models import Basket, BonusDiscountLineItem, ProductItem

from .inputs import ensure_basket, ensure_product_item, ensure_promotion_lookup
from .qualification import resolve_promotion_ids
from .shipments import is_pickup_line

logger = logging.getLogger(__name__)


def aggregate_by_product(lines: Iterable[ProductItem]) -> list[ProductItem]:
    """
    Merge bonus lines of the same product into one line per product.

    Each result is a copy of the first line seen for the product with the
    summed quantity; products keep first-seen order.
    """
    totals: dict[str | None, int] = {}
    samples: dict[str | None, ProductItem] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + (line.quantity or 0)
        samples.setdefault(line.product_id, line)
    return [
        samples[product_id].model_copy(update={"quantity": quantity})
        for product_id, quantity in totals.items()
    ]


def _bonus_lines_for_promotions(
    basket: Basket, promotion_ids: list[str]
) -> tuple[list[BonusDiscountLineItem], list[ProductItem]]:
    discount_lines = [
        line
        for line in basket.bonus_discount_line_items
        if line.promotion_id in promotion_ids
    ]
    line_ids = {line.id for line in discount_lines}
    bonus_lines = [
        item
        for item in basket.product_items
        if item.bonus_product_line_item and item.bonus_discount_line_item_id in line_ids
    ]
    return discount_lines, bonus_lines


def allocate_bonus_for_cart_item(
    basket: Basket | Mapping[str, Any] | None,
    target_line: ProductItem | Mapping[str, Any] | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> list[ProductItem]:
    """
    Return the bonus units allocated to one purchased cart line.

    Args:
        basket: Basket snapshot
        target_line: Purchased line to allocate for
        promotion_lookup: productId -> product data with promotion tags
        rule_qualifying_map: promotionId -> qualifying productIds for
            rule-based promotions

    Returns:
        Bonus lines aggregated by product ID, each a copy of the first source
        bonus line with the allocated quantity
    """
    basket = ensure_basket(basket)
    target_line = ensure_product_item(target_line)
    lookup = ensure_promotion_lookup(promotion_lookup)
    if basket is None or target_line is None or lookup is None:
        return []

    target_promotion_ids = resolve_promotion_ids(
        basket, target_line.product_id, lookup, rule_qualifying_map
    )
    if not target_promotion_ids:
        return []

    # (cart position, line) pairs of purchased lines sharing a promotion
    qualifying = [
        (position, item)
        for position, item in enumerate(basket.product_items)
        if not item.bonus_product_line_item
        and any(
            promotion_id in target_promotion_ids
            for promotion_id in resolve_promotion_ids(
                basket, item.product_id, lookup, rule_qualifying_map
            )
        )
    ]
    if not qualifying:
        return []

    discount_lines, bonus_lines = _bonus_lines_for_promotions(basket, target_promotion_ids)
    if not discount_lines or not bonus_lines:
        return []

    if len(qualifying) == 1:
        return aggregate_by_product(bonus_lines)

    total_quantity = sum(item.quantity or 1 for _, item in qualifying)
    if total_quantity == 0:
        return []
    total_capacity = sum(line.capacity for line in discount_lines)

    pool: deque[ProductItem] = deque(
        line.model_copy(update={"quantity": 1})
        for line in bonus_lines
        for _ in range(line.quantity or 1)
    )

    ordered = sorted(
        qualifying,
        key=lambda entry: (not is_pickup_line(basket, entry[1]), entry[0]),
    )

    allocations: dict[str | None, list[ProductItem]] = {}
    for _, item in ordered:
        if not pool:
            break
        item_capacity = (total_capacity * (item.quantity or 1)) // total_quantity
        allocations[item.item_id] = [
            pool.popleft() for _ in range(min(item_capacity, len(pool)))
        ]
        logger.debug(
            "Allocated %d bonus units to line %s (capacity %d)",
            len(allocations[item.item_id]),
            item.item_id,
            item_capacity,
        )

    return aggregate_by_product(allocations.get(target_line.item_id, []))


def bonus_products_in_cart_for_product(
    basket: Basket | Mapping[str, Any] | None,
    product_id: str | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> list[ProductItem]:
    """Every bonus unit in the cart for the product's promotions, ignoring capacity."""

    basket = ensure_basket(basket)
    lookup = ensure_promotion_lookup(promotion_lookup)
    if basket is None or not product_id or lookup is None:
        return []

    promotion_ids = resolve_promotion_ids(basket, product_id, lookup, rule_qualifying_map)
    if not promotion_ids:
        return []
    _, bonus_lines = _bonus_lines_for_promotions(basket, promotion_ids)
    return aggregate_by_product(bonus_lines)


def qualifying_product_ids_for_discount_line(
    basket: Basket | Mapping[str, Any] | None, discount_line_id: str | None
) -> list[str]:
    """Product IDs of lines whose price adjustments carry the discount line's promotion."""

    basket = ensure_basket(basket)
    if basket is None or not discount_line_id:
        return []
    discount_line = basket.discount_line(discount_line_id)
    if discount_line is None:
        return []
    return [
        item.product_id
        for item in basket.product_items
        if item.price_adjustments is not None
        and item.has_promotion_adjustment(discount_line.promotion_id)
    ]


def qualifying_product_ids_for_bonus_product(
    basket: Basket | Mapping[str, Any] | None,
    bonus_product_id: str | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> list[str]:
    """Purchased product IDs sharing a resolved promotion with a bonus product in the cart."""

    basket = ensure_basket(basket)
    lookup = ensure_promotion_lookup(promotion_lookup)
    if basket is None or not bonus_product_id or lookup is None:
        return []

    in_cart = any(
        item.product_id == bonus_product_id for item in basket.bonus_lines()
    )
    if not in_cart:
        return []

    bonus_promotion_ids = resolve_promotion_ids(
        basket, bonus_product_id, lookup, rule_qualifying_map
    )
    if not bonus_promotion_ids:
        return []

    return [
        item.product_id
        for item in basket.purchased_lines()
        if any(
            promotion_id in bonus_promotion_ids
            for promotion_id in resolve_promotion_ids(
                basket, item.product_id, lookup, rule_qualifying_map
            )
        )
    ]


__all__ = [
    "aggregate_by_product",
    "allocate_bonus_for_cart_item",
    "bonus_products_in_cart_for_product",
    "qualifying_product_ids_for_discount_line",
    "qualifying_product_ids_for_bonus_product",
]
