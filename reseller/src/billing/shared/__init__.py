"""
Shared billing configuration and exceptions.
"""

from .config import (
    DEFAULT_TRIAL_DAYS,
    RENEWAL_THRESHOLD_DAYS,
    MINOR_UNITS_PER_MAJOR,
    DEFAULT_CURRENCY,
    PromotionKind,
    YEXT_PROMOTIONAL_PRICING,
    get_promotional_price,
)
from .exceptions import (
    BillingError,
    SubscriptionError,
    SubscriptionNotFoundError,
    InvalidTransitionError,
    StaleSubscriptionError,
    ActiveSubscriptionDeletionError,
    OutstandingInvoiceDeletionError,
    PaymentError,
    IncompleteSubscriptionError,
    GatewayUnavailableError,
    CircuitBreakerOpenError,
    SubmissionError,
    TrialError,
)

__all__ = [
    'DEFAULT_TRIAL_DAYS',
    'RENEWAL_THRESHOLD_DAYS',
    'MINOR_UNITS_PER_MAJOR',
    'DEFAULT_CURRENCY',
    'PromotionKind',
    'YEXT_PROMOTIONAL_PRICING',
    'get_promotional_price',
    'BillingError',
    'SubscriptionError',
    'SubscriptionNotFoundError',
    'InvalidTransitionError',
    'StaleSubscriptionError',
    'ActiveSubscriptionDeletionError',
    'OutstandingInvoiceDeletionError',
    'PaymentError',
    'IncompleteSubscriptionError',
    'GatewayUnavailableError',
    'CircuitBreakerOpenError',
    'SubmissionError',
    'TrialError',
]
