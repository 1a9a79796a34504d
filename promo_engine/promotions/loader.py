"""
promo_engine/promotions/loader.py
---------------------------------
Turn storage rows (plain dicts, e.g. decoded JSON or DB rows) into
Promotion and CartLine objects.

Defaults follow the storage layer: missing eligible_skus → [],
sku_match_type → 'prefix', current_uses → 0, priority → 0.
"""
from __future__ import annotations
import json
import logging
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from promo_engine.promotions.guards import as_utc
from promo_engine.promotions.models import CartLine, Promotion, to_decimal, to_int


logger = logging.getLogger(__name__)


class PromotionRowError(ValueError):
    """A row that cannot be mapped to a Promotion at all (e.g. no id)."""


# ── Field helpers ─────────────────────────────────────────────────

def parse_timestamp(value) -> Optional[datetime]:
    """ISO-8601 string or datetime → aware datetime (naive = UTC). Bad input → None."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def _config_dict(value) -> dict:
    if isinstance(value, dict):
        return value
    if isinstance(value, str):
        try:
            decoded = json.loads(value or '{}')
        except (ValueError, TypeError):
            return {}
        return decoded if isinstance(decoded, dict) else {}
    return {}


def _flag(value, default: bool) -> bool:
    """Booleans from JSON, CSV or form rows ("false", "0", "no" are False)."""
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes', 'y', 't')


# ── Promotions ────────────────────────────────────────────────────

def promotion_from_row(row: Mapping, default_match_mode: str = 'prefix') -> Promotion:
    """Map one storage row to a Promotion."""
    if row.get('id') is None:
        raise PromotionRowError(f'promotion row without id: {row.get("name")!r}')

    skus = row.get('eligible_skus') or []
    if isinstance(skus, str):
        skus = [skus]

    return Promotion(
        id                    = row['id'],
        name                  = str(row.get('name') or ''),
        description           = row.get('description'),
        active                = _flag(row.get('active'), default=True),
        promo_type            = str(row.get('promo_type') or ''),
        config                = _config_dict(row.get('config')),
        eligible_skus         = [s for s in skus if isinstance(s, str)],
        sku_match_type        = row.get('sku_match_type') or default_match_mode,
        min_quantity          = to_int(row.get('min_quantity')),
        max_uses_per_customer = to_int(row.get('max_uses_per_customer')),
        max_total_uses        = to_int(row.get('max_total_uses')),
        current_uses          = to_int(row.get('current_uses')) or 0,
        priority              = to_int(row.get('priority')) or 0,
        starts_at             = parse_timestamp(row.get('starts_at')),
        ends_at               = parse_timestamp(row.get('ends_at')),
    )


def promotions_from_rows(rows: Iterable[Mapping], default_match_mode: str = 'prefix') -> List[Promotion]:
    """Map rows, dropping (and logging) the ones without an id."""
    promotions = []
    for row in rows:
        try:
            promotions.append(promotion_from_row(row, default_match_mode))
        except PromotionRowError as e:
            logger.warning('Skipping promotion row: %s', e)
    return promotions


# ── Cart ──────────────────────────────────────────────────────────

def cart_from_rows(rows: Iterable[Mapping]) -> List[CartLine]:
    """
    Build cart lines from dicts with `sku`/`product_identifier`,
    `price`/`unit_price` and `quantity`. Order is preserved;
    lines with a non-positive quantity or a negative price are dropped.
    """
    lines = []
    for row in rows:
        identifier = row.get('product_identifier') or row.get('sku') or ''
        price_raw  = row.get('unit_price', row.get('price'))
        price      = to_decimal(price_raw)
        qty        = to_int(row.get('quantity'))

        if not identifier or price is None or qty is None:
            logger.warning('Dropping unreadable cart row: %r', dict(row))
            continue
        if qty <= 0 or price < 0:
            continue

        lines.append(CartLine(product_identifier=str(identifier),
                              unit_price=price, quantity=qty))
    return lines
