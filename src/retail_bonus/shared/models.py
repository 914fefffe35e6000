"""
Core data models for the bonus-product allocation engine.

This module contains the basket snapshot models (product lines, bonus discount
line items, shipments) and the product-promotion lookup models as returned by
the commerce API. Field aliases follow the API's camelCase payloads; snake_case
attribute names are accepted as well.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ================================
# BASKET MODELS
# ================================


class PromotionKind(str, Enum):
    """How a bonus promotion defines its catalog of bonus products."""

    LIST_BASED = "LIST_BASED"  # fixed, enumerated bonusProducts
    RULE_BASED = "RULE_BASED"  # catalog resolved by an external product search


class WireModel(BaseModel):
    """Base model for commerce API payloads."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


def _lenient_id(v: Any) -> str | None:
    """Coerce numeric IDs to strings; any other non-string value is unknown."""
    if isinstance(v, str):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return None


class PriceAdjustment(WireModel):
    """Price adjustment applied to a purchased line by a promotion."""

    promotion_id: str | None = Field(
        None, alias="promotionId", description="Promotion that applied this adjustment"
    )


class ProductItem(WireModel):
    """A product line in the basket, either purchased or granted as a bonus."""

    item_id: str | None = Field(None, alias="itemId", description="Unique line ID")
    product_id: str | None = Field(None, alias="productId", description="Product ID")
    quantity: int | None = Field(None, ge=0, description="Units on this line")
    shipment_id: str | None = Field(
        None, alias="shipmentId", description="Shipment this line belongs to"
    )
    bonus_product_line_item: bool = Field(
        False,
        alias="bonusProductLineItem",
        description="True when the line is a free bonus unit rather than a purchase",
    )
    bonus_discount_line_item_id: str | None = Field(
        None,
        alias="bonusDiscountLineItemId",
        description="Discount line that granted this bonus line",
    )
    # None (absent) is distinct from an empty list for list-based qualification
    price_adjustments: list[PriceAdjustment] | None = Field(
        None, alias="priceAdjustments", description="Promotions applied to this line"
    )

    @field_validator("bonus_product_line_item", mode="before")
    @classmethod
    def none_bonus_flag_to_false(cls, v: Any) -> Any:
        """Treat a null bonus flag as a purchased line."""
        if v is None:
            return False
        return v

    @field_validator("shipment_id", mode="before")
    @classmethod
    def lenient_shipment_id(cls, v: Any) -> str | None:
        """A malformed shipment reference leaves the line unassigned (delivery)."""
        return _lenient_id(v)

    def has_promotion_adjustment(self, promotion_id: str) -> bool:
        """Return True if any price adjustment on this line carries ``promotion_id``."""
        return any(
            adjustment.promotion_id == promotion_id
            for adjustment in self.price_adjustments or []
        )


class BonusProduct(WireModel):
    """A product offered as a bonus by a discount line."""

    product_id: str | None = Field(None, alias="productId", description="Product ID")
    product_name: str | None = Field(
        None, alias="productName", description="Display name"
    )


class BonusDiscountLineItem(WireModel):
    """Basket-level record of one grant of a bonus promotion."""

    id: str | None = Field(None, description="Unique discount line ID")
    promotion_id: str | None = Field(
        None, alias="promotionId", description="Promotion that produced this line"
    )
    max_bonus_items: int | None = Field(
        None,
        ge=0,
        alias="maxBonusItems",
        description="Bonus units this discount line may justify (absent means 0)",
    )
    bonus_products: list[BonusProduct] = Field(
        default_factory=list,
        alias="bonusProducts",
        description="Fixed bonus catalog; empty for rule-based promotions",
    )
    kind: PromotionKind = Field(
        PromotionKind.RULE_BASED, description="Derived from bonus_products on load"
    )

    @field_validator("bonus_products", mode="before")
    @classmethod
    def none_products_to_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        return v

    @model_validator(mode="after")
    def derive_kind(self) -> "BonusDiscountLineItem":
        """Decide list-based vs rule-based once, when the line is loaded."""
        self.kind = (
            PromotionKind.LIST_BASED if self.bonus_products else PromotionKind.RULE_BASED
        )
        return self

    @property
    def capacity(self) -> int:
        """Maximum bonus units, treating an absent cap as 0."""
        return self.max_bonus_items or 0

    def offers_product(self, product_id: str) -> bool:
        """Return True if ``product_id`` is in this line's fixed bonus catalog."""
        return any(product.product_id == product_id for product in self.bonus_products)


class ShippingMethod(WireModel):
    """Shipping method attached to a shipment."""

    id: str | None = Field(None, description="Shipping method ID")
    c_store_pickup_enabled: bool | None = Field(
        None,
        alias="c_storePickupEnabled",
        description="True when the method is pickup-in-store",
    )

    @field_validator("c_store_pickup_enabled", mode="before")
    @classmethod
    def non_bool_flag_to_none(cls, v: Any) -> bool | None:
        """Only a real boolean marks a pickup method; anything else is unknown."""
        if isinstance(v, bool):
            return v
        return None


class Shipment(WireModel):
    """Shipment record of the basket."""

    shipment_id: str | None = Field(None, alias="shipmentId", description="Shipment ID")
    shipping_method: ShippingMethod | None = Field(
        None, alias="shippingMethod", description="Selected shipping method"
    )
    c_from_store_id: str | None = Field(
        None, alias="c_fromStoreId", description="Pickup store, if any"
    )

    @field_validator("shipping_method", mode="before")
    @classmethod
    def malformed_method_to_none(cls, v: Any) -> Any:
        """Drop shipping methods that are not objects."""
        if isinstance(v, (dict, ShippingMethod)):
            return v
        return None

    @field_validator("shipment_id", "c_from_store_id", mode="before")
    @classmethod
    def lenient_ids(cls, v: Any) -> str | None:
        return _lenient_id(v)


class Basket(WireModel):
    """Read-only shopping cart snapshot."""

    basket_id: str | None = Field(None, alias="basketId", description="Basket ID")
    product_items: list[ProductItem] = Field(
        default_factory=list,
        alias="productItems",
        description="Product lines in cart order",
    )
    bonus_discount_line_items: list[BonusDiscountLineItem] = Field(
        default_factory=list,
        alias="bonusDiscountLineItems",
        description="Bonus promotion grants",
    )
    shipments: list[Shipment] = Field(default_factory=list, description="Shipments")

    @field_validator(
        "product_items", "bonus_discount_line_items", "shipments", mode="before"
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        return v

    @field_validator("shipments", mode="before")
    @classmethod
    def drop_malformed_shipments(cls, v: Any) -> Any:
        """Skip shipment entries that are not objects; their lines fall back to delivery."""
        if isinstance(v, list):
            return [s for s in v if isinstance(s, (dict, Shipment))]
        return v

    def discount_line(self, discount_line_id: str | None) -> BonusDiscountLineItem | None:
        """Return the discount line with this ID, if present."""
        if not discount_line_id:
            return None
        return next(
            (line for line in self.bonus_discount_line_items if line.id == discount_line_id),
            None,
        )

    def discount_lines_for_promotion(
        self, promotion_id: str | None
    ) -> list[BonusDiscountLineItem]:
        """Return every discount line of a promotion, in basket order."""
        return [
            line
            for line in self.bonus_discount_line_items
            if line.promotion_id == promotion_id
        ]

    def shipment(self, shipment_id: str | None) -> Shipment | None:
        """Return the shipment with this ID, if present."""
        if shipment_id is None:
            return None
        return next(
            (s for s in self.shipments if s.shipment_id == shipment_id),
            None,
        )

    def first_line_for_product(self, product_id: str) -> ProductItem | None:
        """Return the first product line (in cart order) for ``product_id``."""
        return next(
            (item for item in self.product_items if item.product_id == product_id),
            None,
        )

    def bonus_lines(self) -> list[ProductItem]:
        """Bonus lines in cart order."""
        return [item for item in self.product_items if item.bonus_product_line_item]

    def purchased_lines(self) -> list[ProductItem]:
        """Purchased (non-bonus) lines in cart order."""
        return [item for item in self.product_items if not item.bonus_product_line_item]


# ================================
# PRODUCT PROMOTION LOOKUP MODELS
# ================================


class ProductPromotion(WireModel):
    """Promotion tag on a product, as returned by the products endpoint."""

    promotion_id: str | None = Field(
        None, alias="promotionId", description="Promotion ID"
    )
    callout_msg: str | None = Field(
        None, alias="calloutMsg", description="Promotion callout, may contain HTML"
    )


class MasterProduct(WireModel):
    """Master (parent) product reference of a variant."""

    master_id: str | None = Field(None, alias="masterId", description="Master ID")


class ProductWithPromotions(WireModel):
    """Product data fetched with its promotion tags."""

    id: str | None = Field(None, description="Product ID")
    product_promotions: list[ProductPromotion] | None = Field(
        None, alias="productPromotions", description="Promotion tags"
    )
    master: MasterProduct | None = Field(None, description="Master product reference")

    @field_validator("master", mode="before")
    @classmethod
    def malformed_master_to_none(cls, v: Any) -> Any:
        if isinstance(v, (dict, MasterProduct)):
            return v
        return None

    @property
    def master_id(self) -> str | None:
        """Master product ID, when the lookup exposes one."""
        return self.master.master_id if self.master else None

    def promotion_ids(self) -> list[str]:
        """Candidate promotion IDs in tag order, dropping null IDs."""
        return [
            promotion.promotion_id
            for promotion in self.product_promotions or []
            if promotion.promotion_id is not None
        ]
