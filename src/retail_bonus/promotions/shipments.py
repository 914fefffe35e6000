"""Shipment helpers used to prioritise pickup lines."""

from __future__ import annotations

from retail_bonus.shared.models import Basket, ProductItem, Shipment, ShippingMethod


def is_pickup_method(shipping_method: ShippingMethod | None) -> bool:
    """Return True only for methods explicitly flagged as pickup-in-store."""

    return shipping_method is not None and shipping_method.c_store_pickup_enabled is True


def is_pickup_shipment(shipment: Shipment | None) -> bool:
    """Return True if the shipment is configured for pickup-in-store."""

    return shipment is not None and is_pickup_method(shipment.shipping_method)


def is_pickup_line(basket: Basket, item: ProductItem) -> bool:
    """Resolve a line's shipment; unknown or malformed shipments count as delivery."""

    return is_pickup_shipment(basket.shipment(item.shipment_id))


__all__ = [
    "is_pickup_method",
    "is_pickup_shipment",
    "is_pickup_line",
]
