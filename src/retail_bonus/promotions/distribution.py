"""
Distribution of bonus selections across discount lines.

When a shopper adds bonus products, the requested quantity is spread greedily
over the promotion's discount lines that still have room, in basket order.
Each resulting ``(discount line, quantity)`` entry becomes one basket-addition
request.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from retail_bonus.shared.models import Basket

from .availability import find_available_discount_lines, remaining_bonus_quantity
from .inputs import ensure_basket
from .models import BonusAddRequest, BonusSelection, DistributionEntry

logger = logging.getLogger(__name__)


def validate_and_cap_quantity(requested: int | None, max_allowed: int | None = None) -> int:
    """Default a missing quantity to 1, enforce a minimum of 1 and cap to ``max_allowed``.

    A ``max_allowed`` of 0 or None means no ceiling.
    """
    quantity = max(requested or 1, 1)
    if max_allowed and quantity > max_allowed:
        quantity = max_allowed
    return quantity


def plan_distribution(
    requested_quantity: int | None,
    available_pairs: Iterable[Sequence[Any]],
    max_allowed: int | None = None,
) -> list[DistributionEntry]:
    """
    Spread a requested quantity over discount lines.

    Args:
        requested_quantity: Units the shopper asked for
        available_pairs: ``(discount_line_id, available_quantity)`` pairs in
            the order they should be filled
        max_allowed: Optional ceiling applied before distributing

    Returns:
        One entry per discount line used; the total may be lower than the
        requested quantity when the pairs run out
    """
    remaining = validate_and_cap_quantity(requested_quantity, max_allowed)
    distribution: list[DistributionEntry] = []
    for discount_line_id, available in available_pairs:
        if remaining <= 0:
            break
        quantity = min(remaining, available)
        distribution.append(DistributionEntry(discount_line_id, quantity))
        remaining -= quantity
    return distribution


def build_bonus_add_requests(
    distribution: Iterable[DistributionEntry],
    product_id: str,
    price: float | None = None,
) -> list[BonusAddRequest]:
    """Turn a distribution plan into basket-addition requests for one product."""

    return [
        BonusAddRequest(
            product_id=product_id,
            quantity=int(entry.quantity),
            bonus_discount_line_item_id=entry.discount_line_id,
            price=price,
        )
        for entry in distribution
    ]


def _coerce_selection(selection: BonusSelection | Mapping[str, Any]) -> BonusSelection:
    if isinstance(selection, BonusSelection):
        return selection
    return BonusSelection(
        product_id=selection.get("productId") or selection.get("product_id"),
        quantity=selection.get("quantity"),
        price=selection.get("price"),
    )


def plan_bonus_additions(
    basket: Basket | Mapping[str, Any] | None,
    promotion_id: str | None,
    selections: Iterable[BonusSelection | Mapping[str, Any]],
    deduct_planned: bool = True,
) -> list[BonusAddRequest]:
    """
    Plan the basket additions for a shopper's bonus selections.

    Selections are processed in order. Each is capped to the promotion's
    remaining quantity and distributed over its discount lines with room left.
    Selections that find no room are skipped.

    Args:
        basket: Basket snapshot
        promotion_id: Bonus promotion the selections belong to
        selections: Products and quantities chosen by the shopper
        deduct_planned: When True, units planned for earlier selections count
            against the capacity seen by later ones. When False, every
            selection is planned against the unchanged basket snapshot, as
            the storefront's add-to-cart flow does; the caller must then
            re-plan after each addition to avoid over-filling a line.

    Returns:
        Add-to-basket requests in selection order
    """
    basket = ensure_basket(basket)
    if basket is None or not promotion_id:
        return []

    snapshot_total = remaining_bonus_quantity(basket, promotion_id)
    snapshot_available = dict(find_available_discount_lines(basket, promotion_id))
    remaining_total = snapshot_total
    available = dict(snapshot_available)

    requests: list[BonusAddRequest] = []
    for raw_selection in selections:
        selection = _coerce_selection(raw_selection)
        if not deduct_planned:
            remaining_total = snapshot_total
            available = dict(snapshot_available)
        pairs = [(line_id, room) for line_id, room in available.items() if room > 0]
        if not pairs or not selection.product_id:
            logger.debug(
                "Skipping bonus selection %s: no discount line with room",
                selection.product_id,
            )
            continue

        distribution = plan_distribution(selection.quantity, pairs, remaining_total)
        for entry in distribution:
            available[entry.discount_line_id] -= entry.quantity
            remaining_total = max(0, remaining_total - entry.quantity)
        requests.extend(
            build_bonus_add_requests(distribution, selection.product_id, selection.price)
        )
    return requests


__all__ = [
    "validate_and_cap_quantity",
    "plan_distribution",
    "build_bonus_add_requests",
    "plan_bonus_additions",
]
