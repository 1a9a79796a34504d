"""
promo_engine/promotions/formatting.py
-------------------------------------
Short receipt/UI labels for promotions. Display only.
"""
from __future__ import annotations

from promo_engine.promotions.models import to_decimal, to_int


def format_number(value) -> str:
    """10 → "10", 12.50 → "12.5", garbage → "?"."""
    number = to_decimal(value)
    if number is None:
        return '?'
    if number == number.to_integral_value():
        return str(int(number))
    return format(number.normalize(), 'f')


def ordinal(n) -> str:
    value = to_int(n)
    if value is None:
        return '?'
    if 10 <= value % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(value % 10, 'th')
    return f'{value}{suffix}'


def _offer_suffix(config: dict, currency: str) -> str:
    if config.get('discount_percent'):
        return f" {format_number(config['discount_percent'])}% OFF"
    if config.get('discount_amount'):
        return f" {currency}{format_number(config['discount_amount'])} OFF"
    return ''


def describe(promo_type: str, config, currency: str = '$') -> str:
    """Human-readable label for a promotion type and its raw config."""
    if not isinstance(config, dict):
        config = {}

    if promo_type == 'nxm':
        return f"Buy {format_number(config.get('buy'))}, pay {format_number(config.get('pay'))}"

    if promo_type == 'percentage_off':
        return f"{format_number(config.get('discount_percent'))}% OFF"

    if promo_type == 'fixed_amount':
        return f"{currency}{format_number(config.get('discount_amount'))} OFF"

    if promo_type == 'combo':
        return 'Combo deal' + _offer_suffix(config, currency)

    if promo_type == 'bundle':
        return 'Bundle' + _offer_suffix(config, currency)

    if promo_type == 'nth_unit_discount':
        return f"{ordinal(config.get('nth_unit'))} unit {format_number(config.get('discount_percent'))}% OFF"

    return ''
