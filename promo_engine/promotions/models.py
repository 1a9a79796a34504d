"""
promo_engine/promotions/models.py
---------------------------------
Cart line, Promotion and result types.

Promotion.config is a plain dict whose schema depends on promo_type:
  nxm                → {"buy": 3, "pay": 2}
  percentage_off     → {"discount_percent": 10}
  fixed_amount       → {"discount_amount": 500}
  combo              → {"required_skus": ["TEE-", "CAP-"], "discount_percent": 15,
                        "match_type": "prefix"}
  bundle             → {"sku_groups": [["TEE-01", "TEE-02"], ["CAP-01"]],
                        "discount_amount": 1000}
  nth_unit_discount  → {"nth_unit": 2, "discount_percent": 50}

Promotion.typed_config parses that dict into exactly one of the frozen
*Config dataclasses below, or None when the payload is unusable.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple, Union


PROMO_TYPES = [
    ('nxm',                'Buy N, pay M'),
    ('percentage_off',     '% Off'),
    ('fixed_amount',       'Fixed Amount Off'),
    ('combo',              'Combo'),
    ('bundle',             'Bundle'),
    ('nth_unit_discount',  'Nth Unit % Off'),
]
PROMO_TYPE_CHOICES = [p[0] for p in PROMO_TYPES]

MATCH_MODES = ('exact', 'prefix')

HUNDRED = Decimal('100')

# Counts, quantities and priorities never need more digits than this
MAX_INT_DIGITS = 18


# ── Cart ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CartLine:
    """One product identifier at one unit price, times a quantity."""
    product_identifier: str
    unit_price:         Decimal
    quantity:           int

    def __post_init__(self):
        price = to_decimal(self.unit_price)
        if price is None:
            raise ValueError(f'unit_price is not a number: {self.unit_price!r}')
        object.__setattr__(self, 'unit_price', price)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


# ── Config variants ───────────────────────────────────────────────

@dataclass(frozen=True)
class SetDiscountConfig:
    buy: int
    pay: int


@dataclass(frozen=True)
class PercentageConfig:
    percent: Decimal


@dataclass(frozen=True)
class FixedAmountConfig:
    amount: Decimal


@dataclass(frozen=True)
class ComboConfig:
    required_skus: Tuple[str, ...]
    percent:       Optional[Decimal] = None
    amount:        Optional[Decimal] = None
    match_type:    str = 'prefix'


@dataclass(frozen=True)
class BundleConfig:
    sku_groups: Tuple[Tuple[str, ...], ...]
    percent:    Optional[Decimal] = None
    amount:     Optional[Decimal] = None


@dataclass(frozen=True)
class PeriodicUnitConfig:
    nth:     int
    percent: Decimal


PromoConfig = Union[
    SetDiscountConfig, PercentageConfig, FixedAmountConfig,
    ComboConfig, BundleConfig, PeriodicUnitConfig,
]


# ── Raw value coercion ────────────────────────────────────────────

def to_decimal(value) -> Decimal | None:
    """Finite Decimal from an int/float/str/Decimal, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    return number if number.is_finite() else None


def to_int(value) -> int | None:
    """Integral value as int (2, 2.0, "2"), else None."""
    number = to_decimal(value)
    if number is None or number.adjusted() >= MAX_INT_DIGITS:
        return None
    if number != number.to_integral_value():
        return None
    return int(number)


def _percent(value) -> Decimal | None:
    number = to_decimal(value)
    if number is None or not (0 < number <= HUNDRED):
        return None
    return number


def _amount(value) -> Decimal | None:
    number = to_decimal(value)
    if number is None or number <= 0:
        return None
    return number


def _string_list(value) -> Tuple[str, ...] | None:
    if not isinstance(value, (list, tuple)) or not value:
        return None
    if not all(isinstance(s, str) and s for s in value):
        return None
    return tuple(value)


# ── Parsers, one per tag ──────────────────────────────────────────

def _parse_nxm(raw: dict) -> SetDiscountConfig | None:
    buy = to_int(raw.get('buy'))
    pay = to_int(raw.get('pay'))
    if buy is None or pay is None or pay < 0 or buy <= pay:
        return None
    return SetDiscountConfig(buy=buy, pay=pay)


def _parse_percentage(raw: dict) -> PercentageConfig | None:
    percent = _percent(raw.get('discount_percent'))
    return PercentageConfig(percent=percent) if percent is not None else None


def _parse_fixed(raw: dict) -> FixedAmountConfig | None:
    amount = _amount(raw.get('discount_amount'))
    return FixedAmountConfig(amount=amount) if amount is not None else None


def _parse_combo(raw: dict) -> ComboConfig | None:
    required = _string_list(raw.get('required_skus'))
    if required is None:
        return None
    match_type = raw.get('match_type') or 'prefix'
    if match_type not in MATCH_MODES:
        return None
    percent = _percent(raw.get('discount_percent'))
    amount  = _amount(raw.get('discount_amount'))
    if percent is None and amount is None:
        return None
    return ComboConfig(required_skus=required, percent=percent,
                       amount=amount, match_type=match_type)


def _parse_bundle(raw: dict) -> BundleConfig | None:
    groups = raw.get('sku_groups')
    if not isinstance(groups, (list, tuple)) or not groups:
        return None
    parsed = tuple(_string_list(g) for g in groups)
    if any(g is None for g in parsed):
        return None
    percent = _percent(raw.get('discount_percent'))
    amount  = _amount(raw.get('discount_amount'))
    if percent is None and amount is None:
        return None
    return BundleConfig(sku_groups=parsed, percent=percent, amount=amount)


def _parse_nth_unit(raw: dict) -> PeriodicUnitConfig | None:
    nth     = to_int(raw.get('nth_unit'))
    percent = _percent(raw.get('discount_percent'))
    if nth is None or nth < 2 or percent is None:
        return None
    return PeriodicUnitConfig(nth=nth, percent=percent)


_PARSERS = {
    'nxm':               _parse_nxm,
    'percentage_off':    _parse_percentage,
    'fixed_amount':      _parse_fixed,
    'combo':             _parse_combo,
    'bundle':            _parse_bundle,
    'nth_unit_discount': _parse_nth_unit,
}


def parse_config(promo_type: str, raw) -> PromoConfig | None:
    """
    Parse a raw config mapping under its type tag.

    Returns None for an unknown tag, a non-mapping payload, or a payload
    missing the fields the tag requires.
    """
    parser = _PARSERS.get(promo_type)
    if parser is None or not isinstance(raw, dict):
        return None
    return parser(raw)


# ── Promotion ─────────────────────────────────────────────────────

@dataclass
class Promotion:
    """A configurable discount rule, as handed over by the storage layer."""
    id:                    object
    name:                  str
    promo_type:            str
    config:                dict = field(default_factory=dict)
    eligible_skus:         List[str] = field(default_factory=list)
    sku_match_type:        str = 'prefix'
    active:                bool = True
    priority:              int = 0
    min_quantity:          Optional[int] = None
    starts_at:             Optional[datetime] = None
    ends_at:               Optional[datetime] = None
    max_total_uses:        Optional[int] = None
    current_uses:          int = 0
    max_uses_per_customer: Optional[int] = None   # enforced by the caller
    description:           Optional[str] = None

    @property
    def typed_config(self) -> PromoConfig | None:
        return parse_config(self.promo_type, self.config)

    @property
    def type_label(self) -> str:
        return dict(PROMO_TYPES).get(self.promo_type, self.promo_type)

    def __repr__(self):
        return f'<Promotion {self.name!r} {self.promo_type} prio={self.priority}>'


# ── Results ───────────────────────────────────────────────────────

@dataclass
class AppliedPromotion:
    """One promotion that contributed a non-zero discount."""
    promotion_id:    object
    promotion_name:  str
    promo_type:      str
    items_in_promo:  int
    discount_amount: Decimal
    description:     str


@dataclass
class PromoResult:
    """Result of evaluating all promotions against the cart."""
    applied:        List[AppliedPromotion] = field(default_factory=list)
    total_discount: Decimal = Decimal('0')
    original_total: Decimal = Decimal('0')

    @property
    def discounted_total(self) -> Decimal:
        return max(Decimal('0'), self.original_total - self.total_discount)
