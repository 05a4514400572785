"""Tests for settings and process logging setup."""

import logging

from reseller.core.conf import Settings
from reseller.core.log import setup_logging


class TestSettings:

    def test_postgres_url(self):
        settings = Settings(
            DATABASE_TYPE='postgresql',
            DATABASE_USER='app',
            DATABASE_PASSWORD='pw',
            DATABASE_HOST='db',
            DATABASE_PORT=5433,
            DATABASE_SCHEMA='billing',
        )

        assert settings.database_url == 'postgresql+asyncpg://app:pw@db:5433/billing'

    def test_prod_disables_sql_echo(self):
        settings = Settings(ENVIRONMENT='prod', DATABASE_ECHO=True)

        assert settings.DATABASE_ECHO is False

    def test_policy_defaults(self):
        settings = Settings()

        assert settings.STRIPE_MAX_NETWORK_RETRIES == 0
        assert settings.SUBSCRIPTION_RENEWAL_THRESHOLD_DAYS == 14


class TestSetupLogging:

    def test_installs_single_handler(self):
        root = logging.getLogger()
        before = list(root.handlers)
        try:
            setup_logging('DEBUG')
            setup_logging('DEBUG')

            ours = [h for h in root.handlers if getattr(h, '_reseller_handler', False)]
            assert len(ours) == 1
            assert root.level == logging.DEBUG
            assert logging.getLogger('stripe').level == logging.WARNING
        finally:
            root.handlers[:] = before
