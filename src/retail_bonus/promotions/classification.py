"""Decide whether a product's bonus promotion is automatic or a shopper's choice."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from retail_bonus.shared.models import Basket, BonusDiscountLineItem, PromotionKind

from .inputs import ensure_basket
from .qualification import (
    is_product_available_as_bonus,
    is_product_eligible_for_bonus_products,
    resolve_promotion_ids,
)

logger = logging.getLogger(__name__)


def is_rule_based_promotion(
    discount_line: BonusDiscountLineItem | Mapping[str, Any] | None,
) -> bool:
    """Return True for discount lines with a promotion ID and no fixed bonus catalog."""

    if discount_line is None:
        return False
    if not isinstance(discount_line, BonusDiscountLineItem):
        try:
            discount_line = BonusDiscountLineItem.model_validate(discount_line)
        except ValidationError:
            logger.warning("Ignoring invalid discount line: %r", discount_line)
            return False
    return bool(discount_line.promotion_id) and discount_line.kind is PromotionKind.RULE_BASED


def is_automatic_promotion(
    basket: Basket | Mapping[str, Any] | None,
    product_id: str | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> bool:
    """
    Return True when the product's promotions grant bonus items without a choice.

    Automatic promotions leave no discount line in the basket. A product with
    no qualifying promotions at all is not automatic.
    """
    basket = ensure_basket(basket)
    if basket is None or not product_id or promotion_lookup is None:
        return False

    promotion_ids = resolve_promotion_ids(
        basket, product_id, promotion_lookup, rule_qualifying_map
    )
    if not promotion_ids:
        return False
    return not any(
        line.promotion_id in promotion_ids for line in basket.bonus_discount_line_items
    )


def should_show_selection_ui(
    basket: Basket | Mapping[str, Any] | None,
    product_id: str | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> bool:
    """
    Return True if the cart should offer bonus product selection for the product.

    The product must carry promotion tags, must not itself be offered as a
    bonus product, and must not be covered by an automatic promotion.
    """
    if not is_product_eligible_for_bonus_products(product_id, promotion_lookup):
        return False
    if is_product_available_as_bonus(basket, product_id):
        return False
    return not is_automatic_promotion(
        basket, product_id, promotion_lookup, rule_qualifying_map
    )


__all__ = [
    "is_rule_based_promotion",
    "is_automatic_promotion",
    "should_show_selection_ui",
]
