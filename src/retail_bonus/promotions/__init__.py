"""
Bonus-product allocation engine.

Pure functions over a basket snapshot and a product-promotion lookup that
resolve qualifying promotions, bonus capacity, per-line bonus allocation,
bonus removal, and the distribution of new bonus selections.
"""

from .allocation import (
    allocate_bonus_for_cart_item,
    bonus_products_in_cart_for_product,
    qualifying_product_ids_for_bonus_product,
    qualifying_product_ids_for_discount_line,
)
from .availability import (
    available_bonus_items_for_product,
    find_available_discount_lines,
    has_remaining_bonus_products,
    promotion_bonus_counts,
    remaining_bonus_products_for_product,
    remaining_bonus_quantity,
    remaining_capacity,
    selected_quantity,
)
from .classification import (
    is_automatic_promotion,
    is_rule_based_promotion,
    should_show_selection_ui,
)
from .distribution import (
    build_bonus_add_requests,
    plan_bonus_additions,
    plan_distribution,
    validate_and_cap_quantity,
)
from .grouping import group_cart_items
from .inputs import load_basket, load_promotion_lookup
from .models import (
    AvailableBonusProduct,
    BonusAddRequest,
    BonusCounts,
    BonusSelection,
    CartItemGroup,
    DistributionEntry,
    PromotionCapacity,
)
from .qualification import (
    is_product_available_as_bonus,
    is_product_eligible_for_bonus_products,
    promotion_callout_text,
    resolve_promotion_ids,
)
from .removal import find_bonus_items_to_remove
from .search import (
    build_rule_based_search_params,
    build_rule_qualifying_map,
    qualifying_product_ids,
    rule_based_promotion_ids,
)

__all__ = [
    # Results
    "AvailableBonusProduct",
    "BonusAddRequest",
    "BonusCounts",
    "BonusSelection",
    "CartItemGroup",
    "DistributionEntry",
    "PromotionCapacity",
    # Loading
    "load_basket",
    "load_promotion_lookup",
    # Qualification
    "resolve_promotion_ids",
    "promotion_callout_text",
    "is_product_available_as_bonus",
    "is_product_eligible_for_bonus_products",
    # Availability
    "selected_quantity",
    "remaining_capacity",
    "promotion_bonus_counts",
    "remaining_bonus_quantity",
    "available_bonus_items_for_product",
    "remaining_bonus_products_for_product",
    "find_available_discount_lines",
    "has_remaining_bonus_products",
    # Allocation
    "allocate_bonus_for_cart_item",
    "bonus_products_in_cart_for_product",
    "qualifying_product_ids_for_discount_line",
    "qualifying_product_ids_for_bonus_product",
    # Removal
    "find_bonus_items_to_remove",
    # Distribution
    "validate_and_cap_quantity",
    "plan_distribution",
    "build_bonus_add_requests",
    "plan_bonus_additions",
    # Classification
    "is_rule_based_promotion",
    "is_automatic_promotion",
    "should_show_selection_ui",
    # Search
    "rule_based_promotion_ids",
    "build_rule_based_search_params",
    "qualifying_product_ids",
    "build_rule_qualifying_map",
    # Grouping
    "group_cart_items",
]
