"""
Product Lines

Each resold product line is a tag on the subscription plus a set of static
traits. Behavioral hooks for a line live in
``reseller.src.billing.subscriptions.product_lines``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from reseller.src.billing.shared.config import (
    BRAND_CUSTOM_ANNUAL_PLAN,
    BRAND_CUSTOM_MONTHLY_PLAN,
    BRAND_PAYMENT_DESCRIPTION,
    DEFAULT_TRIAL_DAYS,
    LEGACY_PAYMENT_DESCRIPTION,
)


class ProductLine(str, Enum):
    GENERIC = "generic"
    BRAND = "brand"
    YEXT = "yext"
    ADVICE_LOCAL = "advice_local"
    MONO = "mono"
    ZIPWHIP = "zipwhip"


@dataclass(frozen=True)
class ProductLineTraits:
    """
    Static, side-effect free properties of a product line.

    Attributes:
        supports_tier_change: Whether a tier change is applied at all
        supports_trial: Whether a trial window can be started
        trial_days: Trial length when supported
        always_applies_markup: Display the markup total even when it is zero
        markup_multiplier: Factor applied to the markup total for display
        payment_description: Text shown on payment forms
        reports_needs_order: Whether ``needs_order`` reflects the FSM state
        custom_annual_plan: Provider plan for custom yearly pricing
        custom_monthly_plan: Provider plan for custom monthly pricing
    """
    supports_tier_change: bool = True
    supports_trial: bool = False
    trial_days: int = DEFAULT_TRIAL_DAYS
    always_applies_markup: bool = False
    markup_multiplier: int = 1
    payment_description: str = LEGACY_PAYMENT_DESCRIPTION
    reports_needs_order: bool = False
    custom_annual_plan: Optional[str] = None
    custom_monthly_plan: Optional[str] = None


PRODUCT_LINE_TRAITS: Dict[ProductLine, ProductLineTraits] = {
    ProductLine.GENERIC: ProductLineTraits(),
    ProductLine.BRAND: ProductLineTraits(
        supports_tier_change=False,
        payment_description=BRAND_PAYMENT_DESCRIPTION,
        reports_needs_order=True,
        custom_annual_plan=BRAND_CUSTOM_ANNUAL_PLAN,
        custom_monthly_plan=BRAND_CUSTOM_MONTHLY_PLAN,
    ),
    ProductLine.YEXT: ProductLineTraits(always_applies_markup=True),
    ProductLine.ADVICE_LOCAL: ProductLineTraits(),
    ProductLine.MONO: ProductLineTraits(),
    ProductLine.ZIPWHIP: ProductLineTraits(supports_trial=True),
}


def get_traits(line: ProductLine) -> ProductLineTraits:
    """Traits for ``line``; unknown lines behave like the generic line."""
    return PRODUCT_LINE_TRAITS.get(line, PRODUCT_LINE_TRAITS[ProductLine.GENERIC])
