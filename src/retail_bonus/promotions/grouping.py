"""Group purchased cart lines with the bonus products allocated to them."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from retail_bonus.shared.models import Basket

from .allocation import allocate_bonus_for_cart_item
from .availability import remaining_bonus_products_for_product
from .classification import should_show_selection_ui
from .inputs import ensure_basket, ensure_promotion_lookup
from .models import CartItemGroup

logger = logging.getLogger(__name__)


def group_cart_items(
    basket: Basket | Mapping[str, Any] | None,
    promotion_lookup: Mapping[str, Any] | None,
    rule_qualifying_map: Mapping[str, Iterable[str]] | None = None,
) -> list[CartItemGroup]:
    """
    Build one group per purchased cart line, in cart order.

    Lines that do not offer bonus selection get an empty group. For the others
    the group carries the bonus units allocated to the line, the promotion
    capacity of its product and whether more bonus products can be chosen.
    A promotion without any capacity still counts as open for selection.
    """
    basket = ensure_basket(basket)
    if basket is None:
        return []
    lookup = ensure_promotion_lookup(promotion_lookup)

    groups: list[CartItemGroup] = []
    for item in basket.purchased_lines():
        show = lookup is not None and should_show_selection_ui(
            basket, item.product_id, lookup, rule_qualifying_map
        )
        if not show:
            groups.append(CartItemGroup(item=item))
            continue

        capacity = remaining_bonus_products_for_product(
            basket, item.product_id, lookup, rule_qualifying_map=rule_qualifying_map
        )
        groups.append(
            CartItemGroup(
                item=item,
                show_bonus_selection=True,
                bonus_products=allocate_bonus_for_cart_item(
                    basket, item, lookup, rule_qualifying_map
                ),
                capacity=capacity,
                has_remaining_capacity=capacity.has_remaining_capacity
                or capacity.aggregated_max_bonus_items == 0,
            )
        )
    logger.debug("Grouped %d purchased lines", len(groups))
    return groups


__all__ = ["group_cart_items"]
