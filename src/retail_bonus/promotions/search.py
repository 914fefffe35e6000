"""
Product search support for rule-based promotions.

Rule-based promotions carry no bonus catalog in the basket. Callers resolve
both their bonus products and their qualifying products with a product search
refined by promotion ID and promotion product type. This module builds those
search parameters and folds search hits into the maps the engine consumes;
the searches themselves are performed by the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, Mapping

from retail_bonus.config.models import DEFAULT_BONUS_CONFIG, BonusConfig
from retail_bonus.shared.models import Basket

from .classification import is_rule_based_promotion
from .inputs import ensure_basket

logger = logging.getLogger(__name__)

PromotionProductType = Literal["bonus", "qualifying"]


def rule_based_promotion_ids(basket: Basket | Mapping[str, Any] | None) -> list[str]:
    """Promotion IDs of the basket's rule-based discount lines, first-seen order, no duplicates."""

    basket = ensure_basket(basket)
    if basket is None:
        return []
    promotion_ids: list[str] = []
    for line in basket.bonus_discount_line_items:
        if is_rule_based_promotion(line) and line.promotion_id not in promotion_ids:
            promotion_ids.append(line.promotion_id)
    return promotion_ids


def build_rule_based_search_params(
    promotion_id: str,
    product_type: PromotionProductType,
    limit: int | None = None,
    offset: int | None = None,
    settings: BonusConfig | None = None,
) -> dict[str, Any]:
    """
    Build product search parameters for a rule-based promotion.

    Args:
        promotion_id: Rule-based promotion to search for
        product_type: ``"bonus"`` for the products the promotion grants,
            ``"qualifying"`` for the products that trigger it
        limit: Page size; falls back to the configured limit for the type
        offset: Result offset; falls back to the configured offset
        settings: Configuration to read defaults from

    Returns:
        Search parameters with ``refine``, ``limit`` and ``offset`` keys
    """
    if product_type not in ("bonus", "qualifying"):
        raise ValueError(f"Unknown promotion product type: {product_type!r}")

    search = (settings or DEFAULT_BONUS_CONFIG).search
    default_limit = search.bonus_limit if product_type == "bonus" else search.qualifying_limit
    return {
        "refine": [f"pmid={promotion_id}", f"pmpt={product_type}"],
        "limit": limit or default_limit,
        "offset": offset or search.offset,
    }


def qualifying_product_ids(hits: Iterable[Mapping[str, Any]] | None) -> frozenset[str]:
    """Product IDs of search hits, skipping hits without one."""

    if not hits:
        return frozenset()
    return frozenset(hit.get("productId") for hit in hits if hit.get("productId"))


def build_rule_qualifying_map(
    search_results: Mapping[str, Mapping[str, Any] | Iterable[Mapping[str, Any]] | None],
) -> dict[str, frozenset[str]]:
    """
    Fold qualifying-product search results into a promotionId -> productIds map.

    Each value may be a full search response (with ``hits``) or the list of
    hits. Promotions whose search has not returned yet (``None``) are left out
    so that their products fail closed.
    """
    qualifying_map: dict[str, frozenset[str]] = {}
    for promotion_id, result in search_results.items():
        if result is None:
            continue
        hits = result.get("hits") if isinstance(result, Mapping) else result
        qualifying_map[promotion_id] = qualifying_product_ids(hits)
        logger.debug(
            "Promotion %s has %d qualifying products",
            promotion_id,
            len(qualifying_map[promotion_id]),
        )
    return qualifying_map


__all__ = [
    "PromotionProductType",
    "rule_based_promotion_ids",
    "build_rule_based_search_params",
    "qualifying_product_ids",
    "build_rule_qualifying_map",
]
