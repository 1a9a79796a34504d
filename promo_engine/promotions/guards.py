"""
promo_engine/promotions/guards.py
---------------------------------
Structural preconditions that gate a promotion before any calculator runs.

Each check short-circuits; the first failing guard's name is returned so
callers can log why a promotion was skipped.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, List, Optional

from promo_engine.promotions.matching import total_quantity
from promo_engine.promotions.models import CartLine, Promotion


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def check_guards(promotion: Promotion, eligible: List[CartLine], now: datetime) -> Optional[str]:
    """Return the name of the first failing guard, or None if the promotion is live."""
    if not promotion.active:
        return 'inactive'

    if not eligible:
        return 'no_eligible_items'

    if promotion.min_quantity and total_quantity(eligible) < promotion.min_quantity:
        return 'below_min_quantity'

    return schedule_state(promotion, now)


def is_live(promotion: Promotion, eligible: List[CartLine], now: datetime) -> bool:
    return check_guards(promotion, eligible, now) is None


def schedule_state(promotion: Promotion, now: datetime) -> Optional[str]:
    """The cart-independent guards: active flag, time window, total usage cap."""
    if not promotion.active:
        return 'inactive'

    now = as_utc(now)
    if promotion.starts_at and as_utc(promotion.starts_at) > now:
        return 'not_started'
    if promotion.ends_at and as_utc(promotion.ends_at) < now:
        return 'expired'

    # 0 / None both mean "no cap"
    if promotion.max_total_uses and (promotion.current_uses or 0) >= promotion.max_total_uses:
        return 'usage_cap_reached'

    return None
