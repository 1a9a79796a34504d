"""
promo_engine/promotions/matching.py
-----------------------------------
Product-identifier eligibility and small cart aggregates.
"""
from __future__ import annotations
from decimal import Decimal
from typing import Iterable, List

from promo_engine.promotions.models import CartLine


def is_eligible(identifier: str, patterns: Iterable[str], mode: str) -> bool:
    """
    True if `identifier` matches any of `patterns`.

    exact  → verbatim membership
    prefix → case-insensitive startswith
    Any other mode matches nothing.
    """
    if not identifier or not patterns:
        return False
    if mode == 'exact':
        return identifier in patterns
    if mode == 'prefix':
        upper = identifier.upper()
        return any(isinstance(p, str) and upper.startswith(p.upper()) for p in patterns)
    return False


def eligible_lines(lines: Iterable[CartLine], promotion) -> List[CartLine]:
    """Lines whose identifier matches the promotion's eligible_skus, in cart order."""
    patterns = list(promotion.eligible_skus or [])
    return [
        line for line in lines
        if is_eligible(line.product_identifier, patterns, promotion.sku_match_type)
    ]


def total_quantity(lines: Iterable[CartLine]) -> int:
    return sum(line.quantity for line in lines)


def subtotal(lines: Iterable[CartLine]) -> Decimal:
    """Sum of price × qty, unrounded."""
    return sum((line.line_total for line in lines), start=Decimal('0'))
