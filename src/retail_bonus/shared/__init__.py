"""Shared models, exceptions, and logging utilities for the bonus engine."""

from retail_bonus.shared.models import Basket, PromotionKind

__all__ = ["Basket", "PromotionKind"]
