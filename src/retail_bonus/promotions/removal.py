"""Resolve which bonus lines go together when a shopper removes one."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from retail_bonus.shared.models import Basket, ProductItem

from .inputs import ensure_basket, ensure_product_item

logger = logging.getLogger(__name__)


def find_bonus_items_to_remove(
    basket: Basket | Mapping[str, Any] | None,
    target_bonus_line: ProductItem | Mapping[str, Any] | None,
) -> list[ProductItem]:
    """
    Return every bonus line that must be removed along with ``target_bonus_line``.

    That is all bonus lines of the same product granted by the same promotion,
    whichever of the promotion's discount lines produced them. When the
    target's discount line cannot be resolved, only the target itself is
    returned.
    """
    basket = ensure_basket(basket)
    target = ensure_product_item(target_bonus_line)
    if basket is None or target is None or not target.bonus_product_line_item:
        return []

    discount_line = basket.discount_line(target.bonus_discount_line_item_id)
    if discount_line is None:
        logger.debug(
            "Discount line %s not found, removing only line %s",
            target.bonus_discount_line_item_id,
            target.item_id,
        )
        return [target]

    line_ids = {
        line.id for line in basket.discount_lines_for_promotion(discount_line.promotion_id)
    }
    return [
        item
        for item in basket.product_items
        if item.bonus_product_line_item
        and item.product_id == target.product_id
        and item.bonus_discount_line_item_id in line_ids
    ]


__all__ = ["find_bonus_items_to_remove"]
