"""
test_promotion_rules.py — Eligibility matching, guards, config parsing
and description labels.
Run: pytest test_promotion_rules.py -v
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from promo_engine.promotions.formatting import describe, format_number, ordinal
from promo_engine.promotions.guards import check_guards, is_live, schedule_state
from promo_engine.promotions.matching import eligible_lines, is_eligible, subtotal, total_quantity
from promo_engine.promotions.models import (
    BundleConfig, CartLine, ComboConfig, PercentageConfig, PeriodicUnitConfig,
    Promotion, SetDiscountConfig, parse_config, to_decimal, to_int,
)


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def line(sku, price='10', qty=1):
    return CartLine(product_identifier=sku, unit_price=Decimal(price), quantity=qty)


def promo(**kwargs):
    defaults = dict(id=1, name='Rule', promo_type='percentage_off',
                    config={'discount_percent': 10}, eligible_skus=['TEE-'])
    defaults.update(kwargs)
    return Promotion(**defaults)


# ── Matching ──────────────────────────────────────────────────────

def test_exact_match_is_verbatim():
    assert is_eligible('TEE-01', ['TEE-01', 'CAP-01'], 'exact')
    assert not is_eligible('tee-01', ['TEE-01'], 'exact')
    assert not is_eligible('TEE-01X', ['TEE-01'], 'exact')


def test_prefix_match_ignores_case():
    assert is_eligible('tee-basic-000', ['TEE-'], 'prefix')
    assert is_eligible('TEE-BASIC-000', ['cap-', 'tee-b'], 'prefix')
    assert not is_eligible('XTEE-01', ['TEE-'], 'prefix')


@pytest.mark.parametrize('identifier, patterns, mode', [
    ('TEE-01', [], 'prefix'),
    ('', ['TEE-'], 'prefix'),
    ('TEE-01', ['TEE-'], 'regex'),
    ('TEE-01', None, 'exact'),
])
def test_matching_is_total(identifier, patterns, mode):
    assert is_eligible(identifier, patterns, mode) is False


def test_eligible_lines_keep_cart_order():
    cart = [line('TEE-2'), line('CAP-1'), line('tee-1')]
    assert [ln.product_identifier for ln in eligible_lines(cart, promo())] == ['TEE-2', 'tee-1']


def test_aggregates():
    cart = [line('A', '2.50', 2), line('B', '1', 3)]
    assert total_quantity(cart) == 5
    assert subtotal(cart) == Decimal('8')
    assert subtotal([]) == Decimal('0')


# ── Guards ────────────────────────────────────────────────────────

def test_live_promotion_passes_all_guards():
    assert is_live(promo(), [line('TEE-1')], NOW)


def test_inactive_checked_first():
    assert check_guards(promo(active=False), [], NOW) == 'inactive'


def test_no_eligible_lines():
    assert check_guards(promo(), [], NOW) == 'no_eligible_items'


def test_min_quantity_guard():
    rule = promo(min_quantity=3)
    assert check_guards(rule, [line('TEE-1', qty=2)], NOW) == 'below_min_quantity'
    assert check_guards(rule, [line('TEE-1', qty=2), line('TEE-2')], NOW) is None


def test_time_window_bounds_are_inclusive():
    eligible = [line('TEE-1')]
    assert check_guards(promo(starts_at=NOW + timedelta(minutes=1)), eligible, NOW) == 'not_started'
    assert check_guards(promo(ends_at=NOW - timedelta(minutes=1)), eligible, NOW) == 'expired'
    assert check_guards(promo(starts_at=NOW, ends_at=NOW), eligible, NOW) is None


def test_naive_timestamps_are_utc():
    naive_start = datetime(2025, 6, 15, 12, 30)
    assert check_guards(promo(starts_at=naive_start), [line('TEE-1')], NOW) == 'not_started'


def test_usage_cap():
    eligible = [line('TEE-1')]
    assert check_guards(promo(max_total_uses=5, current_uses=5), eligible, NOW) == 'usage_cap_reached'
    assert check_guards(promo(max_total_uses=5, current_uses=9), eligible, NOW) == 'usage_cap_reached'
    assert check_guards(promo(max_total_uses=5, current_uses=4), eligible, NOW) is None
    # 0 means no cap
    assert check_guards(promo(max_total_uses=0, current_uses=4), eligible, NOW) is None


def test_schedule_state_ignores_cart():
    assert schedule_state(promo(), NOW) is None
    assert schedule_state(promo(active=False), NOW) == 'inactive'
    assert schedule_state(promo(ends_at=NOW - timedelta(days=1)), NOW) == 'expired'


# ── Config parsing ────────────────────────────────────────────────

def test_each_tag_parses_to_its_own_variant():
    assert parse_config('nxm', {'buy': 3, 'pay': 2}) == SetDiscountConfig(buy=3, pay=2)
    assert parse_config('percentage_off', {'discount_percent': '12.5'}) == PercentageConfig(Decimal('12.5'))
    assert parse_config('nth_unit_discount', {'nth_unit': 2.0, 'discount_percent': 50}) == \
        PeriodicUnitConfig(nth=2, percent=Decimal('50'))


def test_combo_defaults_to_prefix_match():
    config = parse_config('combo', {'required_skus': ['A-', 'B-'], 'discount_amount': 5})
    assert config == ComboConfig(required_skus=('A-', 'B-'), amount=Decimal('5'), match_type='prefix')


def test_combo_rejects_unknown_match_type():
    assert parse_config('combo', {'required_skus': ['A'], 'discount_percent': 5,
                                  'match_type': 'fuzzy'}) is None


def test_bundle_groups_become_tuples():
    config = parse_config('bundle', {'sku_groups': [['A', 'B'], ['C']], 'discount_percent': 10})
    assert config == BundleConfig(sku_groups=(('A', 'B'), ('C',)), percent=Decimal('10'))


def test_payload_is_not_read_under_another_tag():
    assert parse_config('fixed_amount', {'discount_percent': 10}) is None
    assert parse_config('nxm', {'nth_unit': 2, 'discount_percent': 50}) is None


@pytest.mark.parametrize('value, expected', [
    (True, None), (None, None), ('abc', None), ('Infinity', None),
    ('2.5', Decimal('2.5')), (3, Decimal('3')), (0.5, Decimal('0.5')),
])
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected


def test_to_int_requires_integral_values():
    assert to_int('4') == 4
    assert to_int(4.0) == 4
    assert to_int(4.5) is None
    assert to_int(False) is None


def test_to_int_rejects_huge_exponents():
    assert to_int('1e999999999') is None
    assert to_int('1e17') == 10 ** 17
    assert parse_config('nxm', {'buy': '1e999999999', 'pay': 1}) is None


def test_typed_config_and_label():
    rule = promo(promo_type='nxm', config={'buy': 2, 'pay': 1})
    assert rule.typed_config == SetDiscountConfig(buy=2, pay=1)
    assert rule.type_label == 'Buy N, pay M'
    assert promo(promo_type='unknown').type_label == 'unknown'


# ── Descriptions ──────────────────────────────────────────────────

@pytest.mark.parametrize('promo_type, config, expected', [
    ('nxm', {'buy': 3, 'pay': 2}, 'Buy 3, pay 2'),
    ('percentage_off', {'discount_percent': 15}, '15% OFF'),
    ('percentage_off', {'discount_percent': Decimal('12.50')}, '12.5% OFF'),
    ('fixed_amount', {'discount_amount': 500}, '$500 OFF'),
    ('combo', {'required_skus': ['A']}, 'Combo deal'),
    ('bundle', {'sku_groups': [['A']], 'discount_amount': 20}, 'Bundle $20 OFF'),
    ('nth_unit_discount', {'nth_unit': 2, 'discount_percent': 50}, '2nd unit 50% OFF'),
    ('mystery', {'discount_percent': 10}, ''),
])
def test_describe(promo_type, config, expected):
    assert describe(promo_type, config) == expected


def test_describe_is_total_over_garbage():
    assert describe('nxm', None) == 'Buy ?, pay ?'
    assert describe('fixed_amount', {'discount_amount': 'x'}, currency='€') == '€? OFF'


def test_ordinals():
    assert [ordinal(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 103)] == \
        ['1st', '2nd', '3rd', '4th', '11th', '12th', '13th', '21st', '22nd', '103rd']


def test_format_number():
    assert format_number(Decimal('10.00')) == '10'
    assert format_number(Decimal('1E+2')) == '100'
    assert format_number('0.250') == '0.25'
