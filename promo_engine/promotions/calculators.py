"""
promo_engine/promotions/calculators.py
--------------------------------------
One calculator per promotion type.

Every calculator receives the eligible lines (combo also gets the whole
cart) plus its parsed config, and returns a non-negative Decimal.
Nothing is rounded here; the caller owns currency rounding.
"""
from __future__ import annotations
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, List, Optional

from promo_engine.promotions.matching import is_eligible, subtotal, total_quantity
from promo_engine.promotions.models import (
    HUNDRED, BundleConfig, CartLine, ComboConfig, FixedAmountConfig,
    PercentageConfig, PeriodicUnitConfig, PromoConfig, SetDiscountConfig,
)


ZERO = Decimal('0')


def _clamp(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


def _cheapest_first(lines: List[CartLine]) -> List[CartLine]:
    # sorted() is stable, so equal prices keep cart order
    return sorted(lines, key=lambda line: line.unit_price)


def _percent_or_amount(base: Decimal, percent: Optional[Decimal], amount: Optional[Decimal]) -> Decimal:
    """Percent wins when both are configured; amount is capped at base."""
    if percent:
        return base * percent / HUNDRED
    if amount:
        return min(amount, base)
    return ZERO


# ── Set discount (buy N, pay M) ───────────────────────────────────

def set_discount(eligible: List[CartLine], config: SetDiscountConfig) -> Decimal:
    """
    Buy `buy`, pay `pay`.
    Example: buy 3 pay 2 with 7 units → 2 complete sets → 2 free units,
    taken from the cheapest lines first.
    """
    if config.buy <= config.pay:
        return ZERO

    complete_sets = total_quantity(eligible) // config.buy
    if complete_sets == 0:
        return ZERO

    remaining = complete_sets * (config.buy - config.pay)
    discount  = ZERO
    for line in _cheapest_first(eligible):
        if remaining == 0:
            break
        units     = min(line.quantity, remaining)
        discount += line.unit_price * units
        remaining -= units
    return _clamp(discount)


# ── Percentage / fixed ────────────────────────────────────────────

def percentage_discount(eligible: List[CartLine], config: PercentageConfig) -> Decimal:
    return _clamp(subtotal(eligible) * config.percent / HUNDRED)


def fixed_discount(eligible: List[CartLine], config: FixedAmountConfig) -> Decimal:
    """Fixed amount, never more than the eligible subtotal."""
    return _clamp(min(config.amount, subtotal(eligible)))


# ── Combo ─────────────────────────────────────────────────────────

def combo_discount(cart: List[CartLine], config: ComboConfig) -> Decimal:
    """
    Every required identifier must be present somewhere in the whole cart.
    The discount then applies to the lines matching any required identifier.
    """
    def matches(line: CartLine, required: str) -> bool:
        return is_eligible(line.product_identifier, [required], config.match_type)

    for required in config.required_skus:
        if not any(matches(line, required) for line in cart):
            return ZERO

    combo_lines = [
        line for line in cart
        if any(matches(line, required) for required in config.required_skus)
    ]
    return _clamp(_percent_or_amount(subtotal(combo_lines), config.percent, config.amount))


# ── Bundle ────────────────────────────────────────────────────────

def bundle_discount(eligible: List[CartLine], config: BundleConfig) -> Decimal:
    """At least one exact-match line per group; discount over the union of group lines."""
    for group in config.sku_groups:
        if not any(line.product_identifier in group for line in eligible):
            return ZERO

    bundle_lines = [
        line for line in eligible
        if any(line.product_identifier in group for group in config.sku_groups)
    ]
    return _clamp(_percent_or_amount(subtotal(bundle_lines), config.percent, config.amount))


# ── Periodic unit discount (every Nth unit X% off) ────────────────

def periodic_unit_discount(eligible: List[CartLine], config: PeriodicUnitConfig) -> Decimal:
    """
    Per identifier: floor(qty / nth) units get `percent` off,
    cheapest lines of that identifier first.
    """
    by_identifier: Dict[str, List[CartLine]] = OrderedDict()
    for line in eligible:
        by_identifier.setdefault(line.product_identifier, []).append(line)

    discount = ZERO
    for lines in by_identifier.values():
        qty = total_quantity(lines)
        if qty < config.nth:
            continue

        remaining = qty // config.nth
        for line in _cheapest_first(lines):
            if remaining == 0:
                break
            units     = min(line.quantity, remaining)
            discount += line.unit_price * config.percent / HUNDRED * units
            remaining -= units
    return _clamp(discount)


# ── Dispatch ──────────────────────────────────────────────────────

def calculate(config: PromoConfig, eligible: List[CartLine], cart: List[CartLine]) -> Decimal:
    """Run the calculator matching the config variant."""
    if isinstance(config, SetDiscountConfig):
        return set_discount(eligible, config)
    if isinstance(config, PercentageConfig):
        return percentage_discount(eligible, config)
    if isinstance(config, FixedAmountConfig):
        return fixed_discount(eligible, config)
    if isinstance(config, ComboConfig):
        return combo_discount(cart, config)
    if isinstance(config, BundleConfig):
        return bundle_discount(eligible, config)
    if isinstance(config, PeriodicUnitConfig):
        return periodic_unit_discount(eligible, config)
    return ZERO
