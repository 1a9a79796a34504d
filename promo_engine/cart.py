"""
promo_engine/cart.py
--------------------
Stateless helpers for presenting a cart next to its promotion result.

Amounts are Decimal throughout; rounding happens here, at display time,
never inside the engine.
"""
from decimal import Decimal, ROUND_HALF_UP

from promo_engine.promotions.models import PromoResult


def money(value: Decimal, quantum: Decimal = Decimal('0.01')) -> Decimal:
    """Round half-up to the display quantum."""
    return Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)


def cart_summary(lines, result: PromoResult, quantum: Decimal = Decimal('0.01')) -> dict:
    """
    Build a display summary for the cart and its promotion result.

    Returns:
        {
            'lines':            [{'sku', 'unit_price', 'quantity', 'line_total'}, ...],  ← cart order
            'applied':          [{'id', 'name', 'type', 'items', 'discount', 'description'}, ...],
            'subtotal':         Decimal,
            'total_discount':   Decimal,
            'discounted_total': Decimal,
        }
    """
    return {
        'lines': [
            {
                'sku':        line.product_identifier,
                'unit_price': money(line.unit_price, quantum),
                'quantity':   line.quantity,
                'line_total': money(line.line_total, quantum),
            }
            for line in lines
        ],
        'applied': [
            {
                'id':          entry.promotion_id,
                'name':        entry.promotion_name,
                'type':        entry.promo_type,
                'items':       entry.items_in_promo,
                'discount':    money(entry.discount_amount, quantum),
                'description': entry.description,
            }
            for entry in result.applied
        ],
        'subtotal':         money(result.original_total, quantum),
        'total_discount':   money(result.total_discount, quantum),
        'discounted_total': money(result.discounted_total, quantum),
    }
