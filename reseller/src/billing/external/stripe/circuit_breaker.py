"""
Stripe Circuit Breaker

Implements the circuit breaker pattern for Stripe API calls to prevent
cascading failures when Stripe is experiencing issues.

States:
- CLOSED: Normal operation, requests pass through
- OPEN: Stripe is failing, block requests to prevent overload
- HALF_OPEN: Testing if Stripe has recovered; a single trial call is let through

State is kept per process; the lock only guards the bookkeeping, never the
Stripe call itself, so unrelated subscriptions are not serialized.
"""

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Type

import stripe

from reseller.core.conf import settings
from reseller.src.billing.shared.exceptions import CircuitBreakerOpenError

logger = logging.getLogger(__name__)

# Failures that say Stripe is unhealthy; card declines and invalid requests do not count
STRIPE_OUTAGE_ERRORS: Tuple[Type[Exception], ...] = (
    stripe.APIConnectionError,
    stripe.RateLimitError,
    stripe.APIError,
)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking requests
    HALF_OPEN = "half_open"  # Testing recovery


class StripeCircuitBreaker:
    """
    Circuit breaker for Stripe API calls.

    Usage:
        breaker = StripeCircuitBreaker()
        result = await breaker.safe_call(stripe.Subscription.create_async, customer="...")
    """

    def __init__(
        self,
        circuit_name: str = "stripe_api",
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        expected_exception: Tuple[Type[Exception], ...] = STRIPE_OUTAGE_ERRORS
    ):
        """
        Initialize the circuit breaker.

        Args:
            circuit_name: Unique name for this circuit
            failure_threshold: Number of failures before opening circuit
            recovery_timeout: Seconds to wait before testing recovery
            expected_exception: Exception types counted as failures
        """
        self.circuit_name = circuit_name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self._lock = asyncio.Lock()
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: Optional[datetime] = None
        self._trial_in_flight = False

    @property
    def state(self) -> CircuitState:
        return self._state

    async def safe_call(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute a Stripe API call with circuit breaker protection.

        Args:
            func: Async Stripe API function to call
            *args: Positional arguments for the function
            **kwargs: Keyword arguments for the function

        Returns:
            Result from the Stripe API call

        Raises:
            CircuitBreakerOpenError: If the circuit is open
        """
        async with self._lock:
            allowed = self._should_allow_request()
            state_value = self._state.value
            is_trial = allowed and self._state == CircuitState.HALF_OPEN

        if not allowed:
            logger.warning(f"[CIRCUIT BREAKER] Request blocked - circuit is {state_value}")
            raise CircuitBreakerOpenError(
                message=f"Circuit breaker is {state_value} - blocking request to Stripe API",
                service_name=self.circuit_name,
                reset_time=self._reset_time()
            )

        try:
            result = await func(*args, **kwargs)
        except self.expected_exception as e:
            await self._record_failure(str(e))
            raise
        else:
            await self._record_success()
            return result
        finally:
            if is_trial:
                self._trial_in_flight = False

    async def get_status(self) -> Dict:
        """
        Get current circuit breaker status.

        Returns:
            Dictionary with circuit state and metrics
        """
        async with self._lock:
            return {
                'circuit_name': self.circuit_name,
                'state': self._state.value,
                'failure_count': self._failure_count,
                'last_failure_time': self._last_failure_time.isoformat() if self._last_failure_time else None,
                'failure_threshold': self.failure_threshold,
                'recovery_timeout': self.recovery_timeout,
            }

    def reset(self) -> None:
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time = None
        self._trial_in_flight = False

    def _reset_time(self) -> Optional[float]:
        if self._last_failure_time is None:
            return None
        return self._last_failure_time.timestamp() + self.recovery_timeout

    def _should_allow_request(self) -> bool:
        """Determine if a request should be allowed based on circuit state."""
        if self._state == CircuitState.CLOSED:
            return True
        elif self._state == CircuitState.OPEN:
            if self._last_failure_time:
                time_since_failure = datetime.now(timezone.utc) - self._last_failure_time
                if time_since_failure.total_seconds() >= self.recovery_timeout:
                    self._state = CircuitState.HALF_OPEN
                    self._trial_in_flight = True
                    logger.info(f"[CIRCUIT BREAKER] Transitioned {self.circuit_name} to half-open")
                    return True
            return False
        elif self._state == CircuitState.HALF_OPEN:
            # Only one trial call at a time; the rest wait for its outcome
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
            return True

        return False

    async def _record_success(self):
        """Record a successful API call - reset circuit to closed."""
        async with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info(f"[CIRCUIT BREAKER] {self.circuit_name} recovered, closing circuit")
            self._state = CircuitState.CLOSED
            self._failure_count = 0

    async def _record_failure(self, error_message: str):
        """Record a failed API call - may open circuit if threshold reached."""
        async with self._lock:
            self._failure_count += 1
            self._last_failure_time = datetime.now(timezone.utc)

            if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.failure_threshold:
                self._state = CircuitState.OPEN
                logger.warning(
                    f"[CIRCUIT BREAKER] Circuit opened due to {self._failure_count} failures: {error_message}"
                )
            else:
                logger.debug(f"[CIRCUIT BREAKER] Recorded failure #{self._failure_count} for {self.circuit_name}")


# Global circuit breaker instance
stripe_circuit_breaker = StripeCircuitBreaker(
    failure_threshold=settings.STRIPE_CIRCUIT_FAILURE_THRESHOLD,
    recovery_timeout=settings.STRIPE_CIRCUIT_RECOVERY_SECONDS,
)
