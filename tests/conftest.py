"""
Pytest configuration and fixtures for bonus engine tests.

Provides basket payloads in the commerce API's camelCase shape and small
builders for assembling custom baskets.
"""

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Ensure src/ is on sys.path for local test runs without installation
_SRC = Path(__file__).resolve().parents[1] / "src"
if _SRC.exists() and str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))


def product_line(item_id, product_id, quantity=1, shipment_id="me", promotions=None):
    """Purchased line; ``promotions=None`` leaves priceAdjustments out entirely."""
    line = {
        "itemId": item_id,
        "productId": product_id,
        "quantity": quantity,
        "shipmentId": shipment_id,
        "bonusProductLineItem": False,
    }
    if promotions is not None:
        line["priceAdjustments"] = [{"promotionId": p} for p in promotions]
    return line


def bonus_line(item_id, product_id, discount_line_id, quantity=1, shipment_id="me"):
    """Bonus line granted by a discount line."""
    return {
        "itemId": item_id,
        "productId": product_id,
        "quantity": quantity,
        "shipmentId": shipment_id,
        "bonusProductLineItem": True,
        "bonusDiscountLineItemId": discount_line_id,
    }


def discount_line(line_id, promotion_id, max_bonus_items, bonus_product_ids=()):
    """Discount line; no bonus product IDs makes it rule-based."""
    return {
        "id": line_id,
        "promotionId": promotion_id,
        "maxBonusItems": max_bonus_items,
        "bonusProducts": [
            {"productId": pid, "productName": pid.title()} for pid in bonus_product_ids
        ],
    }


def shipment(shipment_id, pickup=False):
    """Shipment with a delivery or pickup-in-store shipping method."""
    return {
        "shipmentId": shipment_id,
        "shippingMethod": {"id": "pickup" if pickup else "001", "c_storePickupEnabled": pickup},
    }


def basket(product_items, discount_lines, shipments=None, basket_id="basket-1"):
    """Assemble a basket payload."""
    return {
        "basketId": basket_id,
        "productItems": product_items,
        "bonusDiscountLineItems": discount_lines,
        "shipments": shipments if shipments is not None else [shipment("me")],
    }


def tagged(*promotion_ids, master_id=None, callout=None):
    """Product-promotion lookup entry."""
    entry = {
        "productPromotions": [
            {"promotionId": pid, "calloutMsg": callout} for pid in promotion_ids
        ]
    }
    if master_id:
        entry["master"] = {"masterId": master_id}
    return entry


@pytest.fixture
def build():
    """Payload builders for custom baskets."""
    return SimpleNamespace(
        product_line=product_line,
        bonus_line=bonus_line,
        discount_line=discount_line,
        shipment=shipment,
        basket=basket,
        tagged=tagged,
    )


@pytest.fixture
def suit_basket() -> dict:
    """Two suits sharing one tie promotion with four ties already in the cart."""
    return basket(
        [
            product_line("i1", "suit-a", promotions=["promo-suit"]),
            product_line("i2", "suit-b", promotions=["promo-suit"]),
            bonus_line("b1", "tie-1", "d1", quantity=2),
            bonus_line("b2", "tie-1", "d1", quantity=2),
        ],
        [discount_line("d1", "promo-suit", 4, ["tie-1"])],
    )


@pytest.fixture
def suit_lookup() -> dict:
    """Promotion lookup for the suit basket."""
    return {
        "suit-a": tagged("promo-suit", callout="<b>Free tie</b> with any suit"),
        "suit-b": tagged("promo-suit", callout="<b>Free tie</b> with any suit"),
        "tie-1": {"productPromotions": []},
    }


@pytest.fixture
def rule_basket() -> dict:
    """Shoe variant qualifying for a rule-based sock promotion."""
    return basket(
        [
            product_line("i1", "shoe-42", promotions=["promo-rule"]),
            bonus_line("b1", "sock-1", "d-rule", quantity=1),
        ],
        [discount_line("d-rule", "promo-rule", 2)],
    )


@pytest.fixture
def rule_lookup() -> dict:
    """Promotion lookup for the rule-based basket; the variant points to its master."""
    return {"shoe-42": tagged("promo-rule", master_id="shoe")}
