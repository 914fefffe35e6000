"""
Bonus capacity and availability calculations.

Capacity lives on discount lines (``maxBonusItems``) and is consumed by bonus
lines that reference them through ``bonusDiscountLineItemId``. Remaining
capacity is always clamped at zero: baskets can hold more bonus units than a
line nominally allows.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from retail_bonus.shared.models import Basket, BonusDiscountLineItem, BonusProduct, PromotionKind

from .inputs import ensure_basket, ensure_rule_products_map
from .models import AvailableBonusProduct, BonusCounts, PromotionCapacity
from .qualification import resolve_promotion_ids

logger = logging.getLogger(__name__)


def _selected_for_line(basket: Basket, discount_line_id: str | None) -> int:
    return sum(
        item.quantity or 0
        for item in basket.product_items
        if item.bonus_product_line_item
        and item.bonus_discount_line_item_id == discount_line_id
    )


def _catalog(
    discount_line: BonusDiscountLineItem,
    rule_products_map: Mapping[str, list[BonusProduct]],
) -> list[BonusProduct]:
    if discount_line.kind is PromotionKind.RULE_BASED:
        return list(rule_products_map.get(discount_line.promotion_id, []))
    return list(discount_line.bonus_products)


def _matching_discount_lines(
    basket: Basket, promotion_ids: list[str]
) -> list[BonusDiscountLineItem]:
    return [
        line
        for line in basket.bonus_discount_line_items
        if line.promotion_id in promotion_ids
    ]


def selected_quantity(
    basket: Basket | Mapping[str, Any] | None, discount_line_id: str | None
) -> int:
    """Bonus units already in the basket for one discount line."""

    basket = ensure_basket(basket)
    if basket is None or not discount_line_id:
        return 0
    return _selected_for_line(basket, discount_line_id)


def remaining_capacity(
    basket: Basket | Mapping[str, Any] | None, discount_line_id: str | None
) -> int:
    """Bonus units a discount line can still grant, never negative."""

    basket = ensure_basket(basket)
    if basket is None:
        return 0
    discount_line = basket.discount_line(discount_line_id)
    if discount_line is None:
        return 0
    return max(0, discount_line.capacity - _selected_for_line(basket, discount_line.id))


def promotion_bonus_counts(
    basket: Basket | Mapping[str, Any] | None, promotion_id: str | None
) -> BonusCounts:
    """Selected and maximum bonus units summed over a promotion's discount lines."""

    basket = ensure_basket(basket)
    if basket is None or not promotion_id:
        return BonusCounts()

    discount_lines = basket.discount_lines_for_promotion(promotion_id)
    line_ids = {line.id for line in discount_lines if line.id}
    selected = sum(
        item.quantity or 0
        for item in basket.product_items
        if item.bonus_product_line_item and item.bonus_discount_line_item_id in line_ids
    )
    return BonusCounts(
        selected_bonus_items=selected,
        max_bonus_items=sum(line.capacity for line in discount_lines),
    )


def remaining_bonus_quantity(
    basket: Basket | Mapping[str, Any] | None, promotion_id: str | None
) -> int:
    """Promotion-wide remaining bonus units, never negative."""

    counts = promotion_bonus_counts(basket, promotion_id)
    return max(0, counts.max_bonus_items - counts.selected_bonus_items)


def available_bonus_items_for_product(
    basket: Basket | Mapping[str, Any] | None,
    product_id: str | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_products_map: Mapping[str, Iterable[Any]] | None = None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> list[AvailableBonusProduct]:
    """
    List every bonus product offered to a product by its qualifying promotions.

    List-based discount lines offer their fixed catalog; rule-based lines offer
    the products found for the promotion in ``rule_products_map``.
    """
    basket = ensure_basket(basket)
    if basket is None:
        return []
    promotion_ids = resolve_promotion_ids(
        basket, product_id, promotion_lookup, rule_qualifying_map
    )
    if not promotion_ids:
        return []

    products_map = ensure_rule_products_map(rule_products_map)
    return [
        AvailableBonusProduct(
            product=product,
            promotion_id=line.promotion_id,
            discount_line_id=line.id,
        )
        for line in _matching_discount_lines(basket, promotion_ids)
        for product in _catalog(line, products_map)
    ]


def remaining_bonus_products_for_product(
    basket: Basket | Mapping[str, Any] | None,
    product_id: str | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_products_map: Mapping[str, Iterable[Any]] | None = None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> PromotionCapacity:
    """
    Aggregate bonus capacity over every discount line a product qualifies for.

    Args:
        basket: Basket snapshot
        product_id: Purchased product to evaluate
        promotion_lookup: productId -> product data with promotion tags
        rule_products_map: promotionId -> bonus products of rule-based promotions
        rule_qualifying_map: promotionId -> qualifying productIds of rule-based promotions

    Returns:
        Summed maximum and selected units, whether any capacity remains, and
        the bonus products of discount lines that still have room
    """
    basket = ensure_basket(basket)
    if basket is None:
        return PromotionCapacity()
    promotion_ids = resolve_promotion_ids(
        basket, product_id, promotion_lookup, rule_qualifying_map
    )
    if not promotion_ids:
        return PromotionCapacity()

    discount_lines = _matching_discount_lines(basket, promotion_ids)
    if not discount_lines:
        return PromotionCapacity()

    products_map = ensure_rule_products_map(rule_products_map)
    capacity = PromotionCapacity()
    for line in discount_lines:
        selected = _selected_for_line(basket, line.id)
        capacity.aggregated_max_bonus_items += line.capacity
        capacity.aggregated_selected_items += selected

        remaining = max(0, line.capacity - selected)
        if remaining > 0:
            capacity.bonus_items.extend(
                AvailableBonusProduct(
                    product=product,
                    promotion_id=line.promotion_id,
                    discount_line_id=line.id,
                    remaining_bonus_items_count=remaining,
                )
                for product in _catalog(line, products_map)
            )

    capacity.has_remaining_capacity = (
        capacity.aggregated_selected_items < capacity.aggregated_max_bonus_items
    )
    return capacity


def find_available_discount_lines(
    basket: Basket | Mapping[str, Any] | None, promotion_id: str | None
) -> list[tuple[str, int]]:
    """Return ``(discount_line_id, available_quantity)`` pairs with room left, in basket order."""

    basket = ensure_basket(basket)
    if basket is None or not promotion_id:
        return []

    pairs: list[tuple[str, int]] = []
    for line in basket.discount_lines_for_promotion(promotion_id):
        available = max(0, line.capacity - _selected_for_line(basket, line.id))
        if available > 0:
            pairs.append((line.id, available))
    return pairs


def has_remaining_bonus_products(
    basket: Basket | Mapping[str, Any] | None, promotion_id: str | None = None
) -> bool:
    """Return True if any discount line (of ``promotion_id``, when given) is below its cap."""

    basket = ensure_basket(basket)
    if basket is None:
        return False
    lines = (
        basket.discount_lines_for_promotion(promotion_id)
        if promotion_id
        else basket.bonus_discount_line_items
    )
    return any(_selected_for_line(basket, line.id) < line.capacity for line in lines)


__all__ = [
    "selected_quantity",
    "remaining_capacity",
    "promotion_bonus_counts",
    "remaining_bonus_quantity",
    "available_bonus_items_for_product",
    "remaining_bonus_products_for_product",
    "find_available_discount_lines",
    "has_remaining_bonus_products",
]
