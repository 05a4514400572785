"""
Trial Service

Trial window state for a subscription:
- Remaining days, rounded up and never negative
- Whether the trial is still running
- Starting a trial on lines that offer one
"""

import logging
import math
from datetime import datetime
from typing import Optional

from reseller.src.billing.domain import Subscription, get_traits
from reseller.src.billing.shared.exceptions import TrialError
from reseller.utils.timezone import timezone

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class TrialService:
    """
    Computes trial state from ``trial_ends_at``.

    Trial length comes from the product line traits (default 10 days).
    """

    @staticmethod
    def supports_trial(subscription: Subscription) -> bool:
        return get_traits(subscription.product_line).supports_trial

    @staticmethod
    def trial_days(subscription: Subscription) -> int:
        return get_traits(subscription.product_line).trial_days

    def remaining_trial_days(self, subscription: Subscription, now: Optional[datetime] = None) -> int:
        """
        Days left in the trial, rounded up.

        Returns:
            0 when no trial end is set or the trial is over
        """
        if subscription.trial_ends_at is None:
            return 0

        now = now or timezone.now()
        seconds = int((timezone.to_utc(subscription.trial_ends_at) - now).total_seconds())
        return max(0, math.ceil(seconds / SECONDS_PER_DAY))

    def trial_active(self, subscription: Subscription, now: Optional[datetime] = None) -> bool:
        return self.remaining_trial_days(subscription, now) > 0

    def start_trial(self, subscription: Subscription, now: Optional[datetime] = None) -> datetime:
        """
        Stamp ``trial_ends_at`` on the subscription.

        Raises:
            TrialError: the product line has no trial
        """
        if not self.supports_trial(subscription):
            raise TrialError(
                code="TRIAL_NOT_SUPPORTED",
                message=f"Product line '{subscription.product_line.value}' does not offer trials",
                subscription_id=subscription.id
            )

        now = now or timezone.now()
        subscription.trial_ends_at = now + timezone.days(self.trial_days(subscription))
        logger.info(f"[TRIAL] Trial for {subscription.id} runs until {subscription.trial_ends_at.isoformat()}")
        return subscription.trial_ends_at


# Global instance
trial_service = TrialService()


# Convenience functions
def remaining_trial_days(subscription: Subscription, now: Optional[datetime] = None) -> int:
    return trial_service.remaining_trial_days(subscription, now)


def trial_active(subscription: Subscription, now: Optional[datetime] = None) -> bool:
    return trial_service.trial_active(subscription, now)
