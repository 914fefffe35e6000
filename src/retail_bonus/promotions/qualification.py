"""
Promotion qualification for basket products.

A product can be tagged with promotions in the product-promotion lookup without
actually qualifying for them. This module narrows the tags down to the
promotions the product qualifies for in the current basket:

- List-based promotions (fixed bonus catalog) qualify through the price
  adjustments recorded on the product's basket line.
- Rule-based promotions (empty bonus catalog) qualify through the externally
  resolved set of qualifying product IDs, checking the variant first and then
  its master product.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from retail_bonus.shared.models import (
    Basket,
    BonusDiscountLineItem,
    ProductWithPromotions,
    PromotionKind,
)

from .inputs import ensure_basket, ensure_promotion_lookup, ensure_rule_qualifying_map

logger = logging.getLogger(__name__)

_HTML_TAG = re.compile(r"<[^>]*>")


def _qualifies(
    basket: Basket,
    product_id: str,
    product: ProductWithPromotions,
    discount_line: BonusDiscountLineItem,
    rule_map: Mapping[str, frozenset[str]],
) -> bool:
    promotion_id = discount_line.promotion_id

    if discount_line.kind is PromotionKind.RULE_BASED:
        qualifying_ids = rule_map.get(promotion_id)
        if qualifying_ids is None:
            # Qualifying products not resolved yet: fail closed
            return False
        if product_id in qualifying_ids:
            return True
        master_id = product.master_id
        return bool(master_id) and master_id != product_id and master_id in qualifying_ids

    cart_line = basket.first_line_for_product(product_id)
    if cart_line is not None and cart_line.price_adjustments is not None:
        return cart_line.has_promotion_adjustment(promotion_id)
    # Lines without price adjustments predate adjustment tracking
    return True


def resolve_promotion_ids(
    basket: Basket | Mapping[str, Any] | None,
    product_id: str | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> list[str]:
    """
    Return the promotion IDs a product actually qualifies for.

    Args:
        basket: Basket snapshot
        product_id: Product to resolve
        promotion_lookup: productId -> product data with promotion tags
        rule_qualifying_map: promotionId -> qualifying productIds for
            rule-based promotions (absent entries fail closed)

    Returns:
        Qualifying promotion IDs, in the order the lookup tags them
    """
    basket = ensure_basket(basket)
    lookup = ensure_promotion_lookup(promotion_lookup)
    if basket is None or not product_id or lookup is None:
        return []

    product = lookup.get(product_id)
    if product is None or product.product_promotions is None:
        return []

    rule_map = ensure_rule_qualifying_map(rule_qualifying_map)
    qualifying: list[str] = []
    for promotion_id in product.promotion_ids():
        discount_line = next(
            (
                line
                for line in basket.bonus_discount_line_items
                if line.promotion_id == promotion_id
            ),
            None,
        )
        if discount_line is None:
            continue
        if _qualifies(basket, product_id, product, discount_line, rule_map):
            qualifying.append(promotion_id)

    logger.debug("Product %s qualifies for promotions %s", product_id, qualifying)
    return qualifying


def promotion_callout_text(
    product: ProductWithPromotions | Mapping[str, Any] | None, promotion_id: str | None
) -> str:
    """Return a promotion's callout message as plain text (HTML tags stripped)."""

    if product is None or not promotion_id:
        return ""
    if not isinstance(product, ProductWithPromotions):
        try:
            product = ProductWithPromotions.model_validate(product)
        except ValidationError:
            logger.warning("Ignoring invalid product data for callout %s", promotion_id)
            return ""

    promotion = next(
        (p for p in product.product_promotions or [] if p.promotion_id == promotion_id),
        None,
    )
    if promotion is None or not promotion.callout_msg:
        return ""
    return _HTML_TAG.sub("", promotion.callout_msg)


def is_product_available_as_bonus(
    basket: Basket | Mapping[str, Any] | None, product_id: str | None
) -> bool:
    """Return True if any discount line lists the product in its bonus catalog."""

    basket = ensure_basket(basket)
    if basket is None or not product_id:
        return False
    return any(
        line.offers_product(product_id) for line in basket.bonus_discount_line_items
    )


def is_product_eligible_for_bonus_products(
    product_id: str | None, promotion_lookup: Mapping[str, Any] | None
) -> bool:
    """Return True if the product carries at least one promotion tag."""

    lookup = ensure_promotion_lookup(promotion_lookup)
    if not product_id or lookup is None:
        return False
    product = lookup.get(product_id)
    if product is None or product.product_promotions is None:
        return False
    return len(product.product_promotions) > 0


__all__ = [
    "resolve_promotion_ids",
    "promotion_callout_text",
    "is_product_available_as_bonus",
    "is_product_eligible_for_bonus_products",
]
