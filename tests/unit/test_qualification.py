"""Unit tests for promotion qualification."""

from retail_bonus.promotions.qualification import (
    is_product_available_as_bonus,
    is_product_eligible_for_bonus_products,
    promotion_callout_text,
    resolve_promotion_ids,
)
from retail_bonus.shared.models import Basket


class TestListBasedQualification:
    """Test list-based promotions qualified through price adjustments."""

    def test_price_adjustment_qualifies(self, suit_basket, suit_lookup):
        """Test that a matching price adjustment qualifies the product."""
        assert resolve_promotion_ids(suit_basket, "suit-a", suit_lookup) == ["promo-suit"]

    def test_missing_adjustment_excludes(self, build):
        """Test that adjustments for other promotions do not qualify."""
        basket = build.basket(
            [build.product_line("i1", "suit-a", promotions=["other"])],
            [build.discount_line("d1", "promo-suit", 1, ["tie-1"])],
        )
        lookup = {"suit-a": build.tagged("promo-suit")}
        assert resolve_promotion_ids(basket, "suit-a", lookup) == []

    def test_empty_adjustments_exclude(self, build):
        """Test that an empty adjustment list does not qualify."""
        basket = build.basket(
            [build.product_line("i1", "suit-a", promotions=[])],
            [build.discount_line("d1", "promo-suit", 1, ["tie-1"])],
        )
        lookup = {"suit-a": build.tagged("promo-suit")}
        assert resolve_promotion_ids(basket, "suit-a", lookup) == []

    def test_absent_adjustments_qualify(self, build):
        """Test the permissive fallback for lines without priceAdjustments."""
        basket = build.basket(
            [build.product_line("i1", "suit-a")],
            [build.discount_line("d1", "promo-suit", 1, ["tie-1"])],
        )
        lookup = {"suit-a": build.tagged("promo-suit")}
        assert resolve_promotion_ids(basket, "suit-a", lookup) == ["promo-suit"]

    def test_first_line_for_product_decides(self, build):
        """Test that only the first basket line of the product is inspected."""
        basket = build.basket(
            [
                build.product_line("i1", "suit-a", promotions=[]),
                build.product_line("i2", "suit-a", promotions=["promo-suit"]),
            ],
            [build.discount_line("d1", "promo-suit", 1, ["tie-1"])],
        )
        lookup = {"suit-a": build.tagged("promo-suit")}
        assert resolve_promotion_ids(basket, "suit-a", lookup) == []


class TestRuleBasedQualification:
    """Test rule-based promotions qualified through the qualifying map."""

    def test_absent_map_fails_closed(self, rule_basket, rule_lookup):
        """Test that unresolved qualifying products exclude the promotion."""
        assert resolve_promotion_ids(rule_basket, "shoe-42", rule_lookup) == []
        assert resolve_promotion_ids(rule_basket, "shoe-42", rule_lookup, {}) == []

    def test_variant_qualifies(self, rule_basket, rule_lookup):
        """Test a direct variant match."""
        rule_map = {"promo-rule": {"shoe-42"}}
        assert resolve_promotion_ids(rule_basket, "shoe-42", rule_lookup, rule_map) == [
            "promo-rule"
        ]

    def test_master_fallback(self, rule_basket, rule_lookup):
        """Test that the master product ID qualifies its variants."""
        rule_map = {"promo-rule": ["shoe"]}
        assert resolve_promotion_ids(rule_basket, "shoe-42", rule_lookup, rule_map) == [
            "promo-rule"
        ]

    def test_not_in_qualifying_set(self, rule_basket, rule_lookup):
        """Test that products outside the set are excluded."""
        rule_map = {"promo-rule": {"boot"}}
        assert resolve_promotion_ids(rule_basket, "shoe-42", rule_lookup, rule_map) == []


class TestResolvePromotionIds:
    """Test candidate handling shared by both promotion kinds."""

    def test_candidate_order_preserved(self, build):
        """Test that qualifying IDs keep the lookup's tag order."""
        basket = build.basket(
            [build.product_line("i1", "suit-a")],
            [
                build.discount_line("d1", "promo-a", 1, ["tie-1"]),
                build.discount_line("d2", "promo-b", 1, ["belt-1"]),
            ],
        )
        lookup = {"suit-a": build.tagged("promo-b", "promo-x", "promo-a")}
        assert resolve_promotion_ids(basket, "suit-a", lookup) == ["promo-b", "promo-a"]

    def test_unknown_product(self, suit_basket, suit_lookup):
        """Test that products missing from the lookup resolve to nothing."""
        assert resolve_promotion_ids(suit_basket, "hat", suit_lookup) == []

    def test_missing_inputs(self, suit_basket, suit_lookup):
        """Test total behaviour for absent inputs."""
        assert resolve_promotion_ids(None, "suit-a", suit_lookup) == []
        assert resolve_promotion_ids(suit_basket, None, suit_lookup) == []
        assert resolve_promotion_ids(suit_basket, "suit-a", None) == []

    def test_invalid_basket_treated_as_absent(self, suit_lookup):
        """Test that a basket failing validation yields the empty result."""
        assert resolve_promotion_ids({"productItems": "oops"}, "suit-a", suit_lookup) == []

    def test_accepts_models(self, suit_basket, suit_lookup):
        """Test that validated models are accepted as-is."""
        basket = Basket.model_validate(suit_basket)
        assert resolve_promotion_ids(basket, "suit-b", suit_lookup) == ["promo-suit"]


class TestCatalogHelpers:
    """Test callout and catalog helpers."""

    def test_callout_text_strips_html(self, suit_lookup):
        """Test HTML removal from callout messages."""
        text = promotion_callout_text(suit_lookup["suit-a"], "promo-suit")
        assert text == "Free tie with any suit"

    def test_callout_text_unknown_promotion(self, suit_lookup):
        """Test that unknown promotions have no callout."""
        assert promotion_callout_text(suit_lookup["suit-a"], "other") == ""
        assert promotion_callout_text(None, "promo-suit") == ""
        assert promotion_callout_text(suit_lookup["suit-a"], None) == ""

    def test_available_as_bonus(self, suit_basket):
        """Test detection of products offered as bonus."""
        assert is_product_available_as_bonus(suit_basket, "tie-1")
        assert not is_product_available_as_bonus(suit_basket, "suit-a")
        assert not is_product_available_as_bonus(None, "tie-1")

    def test_eligible_for_bonus_products(self, suit_lookup):
        """Test that only products with promotion tags are eligible."""
        assert is_product_eligible_for_bonus_products("suit-a", suit_lookup)
        assert not is_product_eligible_for_bonus_products("tie-1", suit_lookup)
        assert not is_product_eligible_for_bonus_products("hat", suit_lookup)
        assert not is_product_eligible_for_bonus_products("suit-a", None)
