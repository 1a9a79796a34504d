"""
promo_engine/promotions/__init__.py
-----------------------------------
Promotion rules: models, eligibility, guards, calculators and the
evaluation engine.
"""
from promo_engine.promotions.engine import evaluate_promotion, evaluate_promotions  # noqa: F401
from promo_engine.promotions.models import (  # noqa: F401
    AppliedPromotion, CartLine, Promotion, PromoResult, PROMO_TYPES,
)
