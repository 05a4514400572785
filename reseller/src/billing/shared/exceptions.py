"""
Billing Exceptions

Custom exception classes for billing-related errors.
These provide structured error handling across the subscription lifecycle.
"""


class BillingError(Exception):
    """
    Base exception for all billing-related errors.

    All billing exceptions inherit from this class, allowing for
    broad exception handling when needed.
    """

    def __init__(self, message: str, code: str = "BILLING_ERROR", details: dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details
        }


class SubscriptionError(BillingError):
    """
    Raised when there's an issue with subscription management.

    Examples:
        - Subscription not found
        - Brand subscription without a campaign
    """

    def __init__(
        self,
        message: str = "Subscription error",
        code: str = "SUBSCRIPTION_ERROR",
        subscription_id: str = None,
        details: dict = None
    ):
        merged = dict(details or {})
        if subscription_id:
            merged['subscription_id'] = subscription_id
        super().__init__(message=message, code=code, details=merged)
        self.subscription_id = subscription_id


class SubscriptionNotFoundError(SubscriptionError):
    """Raised when a subscription does not exist or was soft-deleted."""

    def __init__(self, subscription_id: str):
        super().__init__(
            message=f"Subscription '{subscription_id}' not found",
            code="SUBSCRIPTION_NOT_FOUND",
            subscription_id=subscription_id
        )


class InvalidTransitionError(SubscriptionError):
    """
    Raised when an event is fired from a state outside its source set.

    Attributes:
        event: Event that was rejected
        current_state: State the subscription was left in (unchanged)
    """

    def __init__(self, event: str, current_state: str, subscription_id: str = None):
        super().__init__(
            message=f"Cannot fire '{event}' from state '{current_state}'",
            code="INVALID_TRANSITION",
            subscription_id=subscription_id,
            details={'event': event, 'current_state': current_state}
        )
        self.event = event
        self.current_state = current_state


class StaleSubscriptionError(SubscriptionError):
    """Raised when another writer committed the subscription first."""

    def __init__(self, subscription_id: str, expected_version: int):
        super().__init__(
            message="Subscription was modified concurrently; reload and retry",
            code="STALE_SUBSCRIPTION",
            subscription_id=subscription_id,
            details={'expected_version': expected_version}
        )
        self.expected_version = expected_version


class ActiveSubscriptionDeletionError(SubscriptionError):
    """Raised when destroying a subscription that is still active."""

    def __init__(self, subscription_id: str = None):
        super().__init__(
            message="cannot delete an active subscription",
            code="ACTIVE_SUBSCRIPTION_DELETION",
            subscription_id=subscription_id
        )


class OutstandingInvoiceDeletionError(SubscriptionError):
    """Raised when destroying a subscription that has invoices."""

    def __init__(self, subscription_id: str = None):
        super().__init__(
            message="cannot delete a subscription with invoice",
            code="OUTSTANDING_INVOICE_DELETION",
            subscription_id=subscription_id
        )


class PaymentError(BillingError):
    """
    Raised when the billing provider rejects a call.

    Examples:
        - Card declined while creating the provider subscription
        - Invalid plan id
    """

    def __init__(
        self,
        message: str = "Payment processing error",
        code: str = "PAYMENT_ERROR",
        subscription_id: str = None,
        stripe_error: str = None
    ):
        details = {}
        if subscription_id:
            details['subscription_id'] = subscription_id
        if stripe_error:
            details['stripe_error'] = stripe_error

        super().__init__(
            message=message,
            code=code,
            details=details
        )
        self.subscription_id = subscription_id
        self.stripe_error = stripe_error


class IncompleteSubscriptionError(PaymentError):
    """Raised when the provider created the subscription in a non-chargeable state."""

    def __init__(self, subscription_id: str = None, provider_subscription_id: str = None):
        super().__init__(
            message="Billing provider returned an incomplete subscription",
            code="INCOMPLETE_SUBSCRIPTION",
            subscription_id=subscription_id
        )
        self.provider_subscription_id = provider_subscription_id
        if provider_subscription_id:
            self.details['provider_subscription_id'] = provider_subscription_id


class GatewayUnavailableError(BillingError):
    """
    Raised when an external service cannot be reached.

    The enclosing transition is aborted; the same event can be retried later.
    """

    def __init__(
        self,
        message: str = "External service unavailable",
        code: str = "GATEWAY_UNAVAILABLE",
        service_name: str = "stripe",
        details: dict = None
    ):
        merged = {'service_name': service_name}
        merged.update(details or {})
        super().__init__(message=message, code=code, details=merged)
        self.service_name = service_name


class CircuitBreakerOpenError(GatewayUnavailableError):
    """Raised when the circuit breaker is open and preventing calls."""

    def __init__(
        self,
        message: str = "Circuit breaker is open. Service temporarily unavailable.",
        service_name: str = "stripe",
        reset_time: float = None
    ):
        super().__init__(
            message=message,
            code="CIRCUIT_BREAKER_OPEN",
            service_name=service_name,
            details={'reset_time': reset_time}
        )
        self.reset_time = reset_time


class SubmissionError(BillingError):
    """Raised when the approval workflow answers with an error status."""

    def __init__(
        self,
        message: str = "Campaign submission failed",
        campaign_code: str = None,
        status_code: int = None
    ):
        details = {}
        if campaign_code:
            details['campaign_code'] = campaign_code
        if status_code is not None:
            details['status_code'] = status_code
        super().__init__(message=message, code="SUBMISSION_FAILED", details=details)
        self.campaign_code = campaign_code
        self.status_code = status_code


class TrialError(BillingError):
    """
    Raised when there's an issue with trial management.

    Examples:
        - Product line does not offer trials
    """

    def __init__(
        self,
        message: str = "Trial error",
        code: str = "TRIAL_ERROR",
        subscription_id: str = None
    ):
        super().__init__(
            message=message,
            code=code,
            details={'subscription_id': subscription_id} if subscription_id else {}
        )
        self.subscription_id = subscription_id
