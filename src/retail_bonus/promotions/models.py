"""Result types produced by the bonus engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from retail_bonus.shared.models import BonusProduct, ProductItem


@dataclass(slots=True, frozen=True)
class BonusCounts:
    """Selected vs maximum bonus units for one promotion."""

    selected_bonus_items: int = 0
    max_bonus_items: int = 0


@dataclass(slots=True, frozen=True)
class AvailableBonusProduct:
    """A bonus product that a discount line offers for selection."""

    product: BonusProduct
    promotion_id: str | None
    discount_line_id: str | None
    remaining_bonus_items_count: int | None = None

    @property
    def product_id(self) -> str | None:
        return self.product.product_id


@dataclass(slots=True)
class PromotionCapacity:
    """Aggregated bonus capacity across a product's qualifying promotions."""

    bonus_items: list[AvailableBonusProduct] = field(default_factory=list)
    aggregated_max_bonus_items: int = 0
    aggregated_selected_items: int = 0
    has_remaining_capacity: bool = False


@dataclass(slots=True, frozen=True)
class DistributionEntry:
    """Quantity planned against one discount line."""

    discount_line_id: str
    quantity: int


@dataclass(slots=True, frozen=True)
class BonusSelection:
    """A shopper's choice of bonus product and quantity."""

    product_id: str
    quantity: int | None = 1
    price: float | None = None


@dataclass(slots=True, frozen=True)
class BonusAddRequest:
    """One basket-addition request for a bonus product."""

    product_id: str
    quantity: int
    bonus_discount_line_item_id: str
    price: float | None = None

    def to_payload(self) -> dict:
        """Render the request as a commerce API product item payload."""
        payload = {
            "productId": self.product_id,
            "quantity": self.quantity,
            "bonusDiscountLineItemId": self.bonus_discount_line_item_id,
        }
        if self.price is not None:
            payload["price"] = self.price
        return payload


@dataclass(slots=True)
class CartItemGroup:
    """A purchased cart line grouped with the bonus products allocated to it."""

    item: ProductItem
    show_bonus_selection: bool = False
    bonus_products: list[ProductItem] = field(default_factory=list)
    capacity: PromotionCapacity = field(default_factory=PromotionCapacity)
    has_remaining_capacity: bool = False


__all__ = [
    "BonusCounts",
    "AvailableBonusProduct",
    "PromotionCapacity",
    "DistributionEntry",
    "BonusSelection",
    "BonusAddRequest",
    "CartItemGroup",
]
