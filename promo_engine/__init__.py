"""
promo_engine
------------
Stateless discount engine: a cart snapshot and a list of promotion
rules in, a total discount and the applied promotions out.
"""
from promo_engine.promotions import (  # noqa: F401
    AppliedPromotion, CartLine, Promotion, PromoResult,
    evaluate_promotion, evaluate_promotions,
)

__version__ = '1.0.0'
