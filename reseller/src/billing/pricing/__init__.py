"""
Pricing Module

Usage:
    from reseller.src.billing.pricing import pricing_engine

    pricing_engine.wholesale_price(subscription)
"""

from .engine import (
    PricingEngine,
    pricing_engine,
    wholesale_price,
    display_price,
    member_payout,
    setup_fee_member_payout,
    setup_fee_wholesale_price,
    set_markup_total,
)
from .promotions import (
    advice_local_promotional_price,
    yext_promotional_price,
)

__all__ = [
    'PricingEngine',
    'pricing_engine',
    'wholesale_price',
    'display_price',
    'member_payout',
    'setup_fee_member_payout',
    'setup_fee_wholesale_price',
    'set_markup_total',
    'advice_local_promotional_price',
    'yext_promotional_price',
]
