"""
Subscription ORM models.

Catalog, subscriber and campaign rows belong to the surrounding application;
only their ids are stored here.
"""

from datetime import datetime
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from reseller.database.db import Base, uuid4_str
from reseller.utils.timezone import timezone


class ProductSubscriptionRecord(Base):
    """Stored form of ``Subscription``; never physically deleted while invoiced."""

    __tablename__ = 'product_subscriptions'

    # -------------------------------------------------------------------------
    # Required fields
    # -------------------------------------------------------------------------

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True)

    product_line: Mapped[str] = mapped_column(
        sa.String(32),
        index=True,
        comment='Product line tag selecting line-specific behavior'
    )

    product_id: Mapped[str] = mapped_column(sa.String(36), index=True)

    subscriber_type: Mapped[str] = mapped_column(
        sa.String(32),
        comment='User, Contact or Subscription'
    )

    subscriber_id: Mapped[str] = mapped_column(sa.String(36), index=True)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    state: Mapped[str] = mapped_column(sa.String(32), default='draft', index=True)

    cycle_type: Mapped[int] = mapped_column(
        sa.SmallInteger,
        default=1,
        comment='0 yearly, 1 monthly, 2 monthly with commitment'
    )

    # -------------------------------------------------------------------------
    # References
    # -------------------------------------------------------------------------

    product_tier_id: Mapped[Optional[str]] = mapped_column(sa.String(36), default=None)
    payment_source_id: Mapped[Optional[str]] = mapped_column(sa.String(36), default=None)
    campaign_id: Mapped[Optional[str]] = mapped_column(sa.String(36), default=None)

    # -------------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------------

    price: Mapped[Optional[int]] = mapped_column(
        sa.Integer,
        default=None,
        comment='Charged price in cents'
    )

    markup_percentage: Mapped[Optional[int]] = mapped_column(sa.Integer, default=None)
    markup_setup_fee: Mapped[Optional[int]] = mapped_column(sa.Integer, default=None)
    markup_success_fee: Mapped[Optional[int]] = mapped_column(sa.Integer, default=None)

    markup_total: Mapped[Optional[int]] = mapped_column(
        sa.Integer,
        default=None,
        comment='Marked-up price in major units'
    )

    stripe_subscription_id: Mapped[Optional[str]] = mapped_column(
        sa.String(255),
        unique=True,
        default=None
    )

    # -------------------------------------------------------------------------
    # Timestamps (UTC)
    # -------------------------------------------------------------------------

    activation_date: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), default=None)
    renewal_date: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True),
        default=None,
        index=True
    )
    canceled_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), default=None)
    trial_ends_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True), default=None)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default_factory=timezone.now
    )

    updated_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True),
        default=None,
        onupdate=timezone.now
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        sa.DateTime(timezone=True),
        default=None,
        index=True,
        comment='Tombstone; rows with a value are hidden from normal queries'
    )

    lock_version: Mapped[int] = mapped_column(
        sa.Integer,
        default=0,
        comment='Bumped on every committed write'
    )


class SubscriptionInvoiceRecord(Base):
    """Provider invoice issued for a subscription."""

    __tablename__ = 'subscription_invoices'

    subscription_id: Mapped[str] = mapped_column(
        sa.String(36),
        sa.ForeignKey('product_subscriptions.id'),
        index=True
    )

    provider_invoice_id: Mapped[str] = mapped_column(sa.String(255), unique=True)

    amount: Mapped[int] = mapped_column(sa.Integer, comment='Amount in cents')

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default_factory=uuid4_str)

    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default_factory=timezone.now
    )
