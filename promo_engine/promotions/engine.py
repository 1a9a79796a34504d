"""
promo_engine/promotions/engine.py
---------------------------------
Pure-Python promotion evaluation engine.

Evaluate promotions against a cart and return a PromoResult with the
applied discounts and the discounted total.

Nothing is written anywhere. Usage counters and rounding belong to the
caller.
"""
from __future__ import annotations
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Tuple

from promo_engine.promotions.calculators import calculate
from promo_engine.promotions.formatting import describe
from promo_engine.promotions.guards import Clock, check_guards, utc_now
from promo_engine.promotions.matching import eligible_lines, subtotal, total_quantity
from promo_engine.promotions.models import AppliedPromotion, CartLine, Promotion, PromoResult


logger = logging.getLogger(__name__)

ZERO = Decimal('0')


# ── Single promotion ──────────────────────────────────────────────

def evaluate_promotion(cart: List[CartLine], promotion: Promotion, now: datetime) -> Tuple[Decimal, int]:
    """
    Evaluate one promotion against the full cart.

    Returns (discount, items_in_promo). Both are zero when a guard fails
    or the config is unusable, exactly as if the promotion did not exist.
    """
    eligible = eligible_lines(cart, promotion)

    reason = check_guards(promotion, eligible, now)
    if reason:
        logger.debug('Skipping promotion: %s', reason, extra={'promo_id': promotion.id})
        return ZERO, 0

    config = promotion.typed_config
    if config is None:
        logger.warning('Ignoring promotion %r: unknown type or malformed config (%s)',
                       promotion.name, promotion.promo_type, extra={'promo_id': promotion.id})
        return ZERO, 0

    discount = calculate(config, eligible, cart)
    if discount <= ZERO:
        return ZERO, 0
    return discount, total_quantity(eligible)


# ── Main public function ──────────────────────────────────────────

def evaluate_promotions(cart: Iterable[CartLine], promotions: Iterable[Promotion],
                        clock: Clock = utc_now, currency: str = '$') -> PromoResult:
    """
    Evaluate a list of promotions against the cart.

    Rules:
    1. Promotions run in priority order, highest first. sorted() is stable
       so equal priorities keep the caller's order.
    2. Each promotion sees the original cart; nothing is marked consumed,
       so discounts from different promotions add up.
    3. Only promotions with a discount > 0 produce an AppliedPromotion.
    4. A broken promotion is logged and skipped, never raised.

    `clock` is read once per call; `currency` only feeds the descriptions.
    """
    cart  = list(cart)
    now   = clock()
    total = ZERO
    applied: List[AppliedPromotion] = []

    ordered = sorted(promotions, key=lambda p: p.priority or 0, reverse=True)

    for promo in ordered:
        try:
            discount, items = evaluate_promotion(cart, promo, now)
        except (ArithmeticError, TypeError, ValueError, AttributeError):
            logger.warning('Promotion %r failed to evaluate; skipped', getattr(promo, 'name', None),
                           exc_info=True, extra={'promo_id': getattr(promo, 'id', None)})
            continue

        if discount <= ZERO:
            continue

        applied.append(AppliedPromotion(
            promotion_id=promo.id,
            promotion_name=promo.name,
            promo_type=promo.promo_type,
            items_in_promo=items,
            discount_amount=discount,
            description=describe(promo.promo_type, promo.config, currency),
        ))
        total += discount
        logger.debug('Applied %s discount %s', promo.promo_type, discount, extra={'promo_id': promo.id})

    return PromoResult(
        applied=applied,
        total_discount=total,
        original_total=subtotal(cart),
    )
