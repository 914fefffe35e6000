"""
Retail Bonus Engine

Bonus-product allocation for storefront baskets:
- Qualification of purchased lines for list-based and rule-based promotions
- Bonus capacity, per-line allocation and removal groups
- Distribution of new bonus selections across discount lines
"""

__version__ = "1.0.0"
