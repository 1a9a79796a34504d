"""
promo_engine/promotions/usage.py
--------------------------------
Usage counters live outside the engine.

The engine only reads `current_uses` / `max_total_uses` off each
Promotion. Per-customer caps and counter increments belong to the
calling layer; this module gives that layer a small interface to do it.
"""
from __future__ import annotations
from collections import Counter
from typing import Hashable, Iterable, List, Protocol, Tuple

from promo_engine.promotions.models import Promotion, PromoResult


class UsageLedger(Protocol):
    """Lookup of how many times a customer has used a promotion."""

    def uses_by_customer(self, promotion_id, customer_id) -> int:
        ...


class InMemoryUsageLedger:
    """Dict-backed ledger for tests and the CLI tester."""

    def __init__(self, uses: Iterable[Tuple[Hashable, Hashable]] = ()):
        self._uses: Counter = Counter(uses)

    def uses_by_customer(self, promotion_id, customer_id) -> int:
        return self._uses[(promotion_id, customer_id)]

    def record(self, promotion_id, customer_id) -> None:
        self._uses[(promotion_id, customer_id)] += 1


def within_customer_cap(promotion: Promotion, customer_id, ledger: UsageLedger) -> bool:
    """True when the promotion has no per-customer cap or the customer is below it."""
    cap = promotion.max_uses_per_customer
    if not cap or customer_id is None:
        return True
    return ledger.uses_by_customer(promotion.id, customer_id) < cap


def filter_for_customer(promotions: Iterable[Promotion], customer_id,
                        ledger: UsageLedger) -> List[Promotion]:
    """Drop promotions the customer has already used up. Order is kept."""
    return [p for p in promotions if within_customer_cap(p, customer_id, ledger)]


def usage_increments(result: PromoResult) -> list:
    """Promotion ids whose counters should go up once the order is finalised."""
    return [entry.promotion_id for entry in result.applied]
