"""Input coercion for the bonus engine.

Every public engine function accepts either validated models or raw API
payloads. The ``load_*`` functions are strict and raise; the ``ensure_*``
functions used by the engine never raise and degrade to an absent input,
which the engine maps to its empty result.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from retail_bonus.shared.exceptions import BasketValidationError, PromotionLookupError
from retail_bonus.shared.models import Basket, BonusProduct, ProductItem, ProductWithPromotions

logger = logging.getLogger(__name__)

PromotionLookup = Mapping[str, ProductWithPromotions]
RuleQualifyingMap = Mapping[str, frozenset[str]]
RuleProductsMap = Mapping[str, list[BonusProduct]]


def _error_locations(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in detail['loc'])}: {detail['msg']}"
        for detail in error.errors()
    ]


def load_basket(data: Basket | Mapping[str, Any]) -> Basket:
    """Validate a basket payload.

    Raises:
        BasketValidationError: If the payload is not a valid basket
    """
    if isinstance(data, Basket):
        return data
    if not isinstance(data, Mapping):
        raise BasketValidationError(
            f"Basket must be a mapping, got {type(data).__name__}"
        )
    try:
        return Basket.model_validate(dict(data))
    except ValidationError as e:
        raise BasketValidationError(
            "Basket payload failed validation",
            basket_id=data.get("basketId") or data.get("basket_id"),
            validation_errors=_error_locations(e),
            original_error=e,
        )


def load_product_item(data: ProductItem | Mapping[str, Any]) -> ProductItem:
    """Validate a single basket line payload."""
    if isinstance(data, ProductItem):
        return data
    if not isinstance(data, Mapping):
        raise BasketValidationError(
            f"Product item must be a mapping, got {type(data).__name__}"
        )
    try:
        return ProductItem.model_validate(dict(data))
    except ValidationError as e:
        raise BasketValidationError(
            "Product item failed validation",
            validation_errors=_error_locations(e),
            original_error=e,
        )


def load_promotion_lookup(
    data: Mapping[str, ProductWithPromotions | Mapping[str, Any]],
) -> dict[str, ProductWithPromotions]:
    """Validate a productId -> product-with-promotions mapping.

    Raises:
        PromotionLookupError: On the first entry that cannot be parsed
    """
    if not isinstance(data, Mapping):
        raise PromotionLookupError(
            f"Promotion lookup must be a mapping, got {type(data).__name__}"
        )
    lookup: dict[str, ProductWithPromotions] = {}
    for product_id, entry in data.items():
        lookup[product_id] = _load_lookup_entry(product_id, entry)
    return lookup


def _load_lookup_entry(product_id: str, entry: Any) -> ProductWithPromotions:
    if isinstance(entry, ProductWithPromotions):
        return entry
    if not isinstance(entry, Mapping):
        raise PromotionLookupError(
            "entry must be a mapping", product_id=product_id, invalid_value=entry
        )
    try:
        return ProductWithPromotions.model_validate(dict(entry))
    except ValidationError as e:
        raise PromotionLookupError(
            "entry failed validation", product_id=product_id, original_error=e
        )


def ensure_basket(basket: Basket | Mapping[str, Any] | None) -> Basket | None:
    """Return a validated basket, or None when absent or invalid."""
    if basket is None or isinstance(basket, Basket):
        return basket
    try:
        return load_basket(basket)
    except BasketValidationError as e:
        logger.warning("Ignoring invalid basket: %s", e)
        return None


def ensure_product_item(item: ProductItem | Mapping[str, Any] | None) -> ProductItem | None:
    """Return a validated basket line, or None when absent or invalid."""
    if item is None or isinstance(item, ProductItem):
        return item
    try:
        return load_product_item(item)
    except BasketValidationError as e:
        logger.warning("Ignoring invalid product item: %s", e)
        return None


def ensure_promotion_lookup(
    lookup: Mapping[str, ProductWithPromotions | Mapping[str, Any]] | None,
) -> dict[str, ProductWithPromotions] | None:
    """Return a validated lookup; entries that cannot be parsed are skipped."""
    if lookup is None or not isinstance(lookup, Mapping):
        return None
    validated: dict[str, ProductWithPromotions] = {}
    for product_id, entry in lookup.items():
        try:
            validated[product_id] = _load_lookup_entry(product_id, entry)
        except PromotionLookupError as e:
            logger.warning("Skipping promotion lookup entry: %s", e)
    return validated


def _id_collection(value: Any) -> Iterable[Any] | None:
    """Return ``value`` when it is a collection of entries, else None."""
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return None
    return value


def ensure_rule_qualifying_map(
    rule_map: Mapping[str, Iterable[str]] | None,
) -> dict[str, frozenset[str]]:
    """Normalise a promotionId -> qualifying productIds map; absent means empty.

    Entries whose value is not a collection of IDs are dropped, so their
    promotion fails closed.
    """
    if not rule_map:
        return {}
    if not isinstance(rule_map, Mapping):
        logger.warning("Ignoring rule qualifying map of type %s", type(rule_map).__name__)
        return {}
    normalised: dict[str, frozenset[str]] = {}
    for promotion_id, product_ids in rule_map.items():
        if product_ids is None:
            continue
        collection = _id_collection(product_ids)
        if collection is None:
            logger.warning(
                "Ignoring qualifying products for %s of type %s",
                promotion_id,
                type(product_ids).__name__,
            )
            continue
        normalised[promotion_id] = frozenset(
            product_id for product_id in collection if isinstance(product_id, str)
        )
    return normalised


def ensure_rule_products_map(
    products_map: Mapping[str, Iterable[BonusProduct | Mapping[str, Any]]] | None,
) -> dict[str, list[BonusProduct]]:
    """Normalise a promotionId -> bonus products map (search hits); absent means empty."""
    if not products_map:
        return {}
    if not isinstance(products_map, Mapping):
        logger.warning("Ignoring rule products map of type %s", type(products_map).__name__)
        return {}
    normalised: dict[str, list[BonusProduct]] = {}
    for promotion_id, products in products_map.items():
        if products is None:
            normalised[promotion_id] = []
            continue
        collection = _id_collection(products)
        if collection is None or isinstance(products, Mapping):
            logger.warning(
                "Ignoring rule-based products for %s of type %s",
                promotion_id,
                type(products).__name__,
            )
            continue
        parsed: list[BonusProduct] = []
        for product in collection:
            if isinstance(product, BonusProduct):
                parsed.append(product)
                continue
            try:
                parsed.append(BonusProduct.model_validate(product))
            except ValidationError:
                logger.warning(
                    "Skipping rule-based product for %s: %r", promotion_id, product
                )
        normalised[promotion_id] = parsed
    return normalised
