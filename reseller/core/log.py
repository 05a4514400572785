"""Process-wide logging setup.

Every module logs through ``logging.getLogger(__name__)``; this only configures
the root handler once at startup.
"""

import logging

from reseller.core.conf import settings


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger from settings (idempotent)."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_STD_LEVEL).upper())

    if any(getattr(h, '_reseller_handler', False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
    handler._reseller_handler = True
    root.addHandler(handler)

    # Stripe's own request logging is noisy at INFO
    logging.getLogger('stripe').setLevel(logging.WARNING)
