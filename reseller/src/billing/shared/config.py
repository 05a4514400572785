"""
Billing Configuration

Subscription policy constants, promotion tables and product-line plan ids.

Usage:
    from reseller.src.billing.shared.config import DEFAULT_TRIAL_DAYS, get_promotional_price

    price = get_promotional_price(rank=1, cycle_index=MONTHLY_CYCLE_INDEX)
"""

from typing import List, Optional, Tuple

from reseller.core.conf import settings


# =============================================================================
# TRIAL & RENEWAL
# =============================================================================
DEFAULT_TRIAL_DAYS: int = settings.SUBSCRIPTION_DEFAULT_TRIAL_DAYS
RENEWAL_THRESHOLD_DAYS: int = settings.SUBSCRIPTION_RENEWAL_THRESHOLD_DAYS


# =============================================================================
# MONEY
# =============================================================================
# Prices are stored in cents; division happens only at presentation boundaries
MINOR_UNITS_PER_MAJOR: int = 100
DEFAULT_CURRENCY: str = settings.STRIPE_CURRENCY

# Provider statuses we act on
PROVIDER_STATUS_INCOMPLETE: str = 'incomplete'
PROVIDER_STATUS_CANCELED: str = 'canceled'


# =============================================================================
# PROMOTIONS
# =============================================================================
class PromotionKind:
    """Named promotions a contact can be eligible for."""
    YEXT_XMAS_2019 = 'yext_xmas_2019'
    ADVICE_LOCAL_BUNDLE = 'advice_local_bundle'


# Index into a promotional pricing row
MONTHLY_CYCLE_INDEX: int = 0
YEARLY_CYCLE_INDEX: int = 1

# Yext holiday pricing in major units, one row per wholesale tier rank: (monthly, yearly)
YEXT_PROMOTIONAL_PRICING: List[Tuple[int, int]] = [
    (0, 0),
    (25, 250),
    (45, 450),
    (85, 850),
]


def get_promotional_price(rank: int, cycle_index: int) -> Optional[int]:
    """Promotional price for a tier rank, or None when the table has no row for it."""
    if rank < 0 or rank >= len(YEXT_PROMOTIONAL_PRICING):
        return None
    return YEXT_PROMOTIONAL_PRICING[rank][cycle_index]


# =============================================================================
# BRAND
# =============================================================================
BRAND_CUSTOM_ANNUAL_PLAN: str = 'brand_custom_annual'
BRAND_CUSTOM_MONTHLY_PLAN: str = 'brand_custom_monthly'

# Tier title that bundles the website optimization order with the post order
BRAND_FULL_OPTIMIZATION_TIER_TITLE: str = 'Includes google post and website optimization'

LEGACY_PAYMENT_DESCRIPTION: str = 'Reputation management and business profile distribution services.'
BRAND_PAYMENT_DESCRIPTION: str = 'Google post'
