"""
Subscription Repository

Persistence boundary for subscriptions:
- ``save`` is a compare-and-swap on ``lock_version``
- ``soft_delete_if_allowed`` checks and tombstones in one conditional UPDATE,
  so no invoice can be attached between the check and the delete
- Tombstoned rows are hidden unless ``with_deleted=True``
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from reseller.src.billing.domain import (
    Campaign,
    CycleType,
    Markup,
    PaymentSource,
    Product,
    ProductLine,
    ProductTier,
    Subscriber,
    SubscriberKind,
    Subscription,
    SubscriptionState,
)
from reseller.src.billing.shared.exceptions import (
    ActiveSubscriptionDeletionError,
    OutstandingInvoiceDeletionError,
    StaleSubscriptionError,
    SubscriptionNotFoundError,
)
from .model import ProductSubscriptionRecord, SubscriptionInvoiceRecord

logger = logging.getLogger(__name__)


class SubscriptionRepository(ABC):
    """Interface for subscription storage."""

    @abstractmethod
    async def add(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    async def get(self, subscription_id: str, with_deleted: bool = False) -> Subscription:
        """
        Load a subscription.

        Raises:
            SubscriptionNotFoundError: no row, or only a tombstoned one
        """
        pass

    @abstractmethod
    async def save(self, subscription: Subscription, expected_version: int) -> Subscription:
        """
        Write every field if the stored ``lock_version`` still equals ``expected_version``.

        On success ``subscription.lock_version`` is bumped.

        Raises:
            StaleSubscriptionError: the stored version moved on
        """
        pass

    @abstractmethod
    async def has_invoices(self, subscription_id: str) -> bool:
        pass

    @abstractmethod
    async def soft_delete_if_allowed(self, subscription: Subscription, deleted_at: datetime) -> Subscription:
        """
        Tombstone the subscription unless it is active or invoiced.

        Raises:
            OutstandingInvoiceDeletionError: an invoice exists
            ActiveSubscriptionDeletionError: state is active
        """
        pass

    @abstractmethod
    async def list_active(self) -> List[Subscription]:
        pass

    @abstractmethod
    async def list_inactive(self) -> List[Subscription]:
        pass

    @abstractmethod
    async def list_up_for_renewal(self, before: datetime) -> List[Subscription]:
        """Subscriptions whose renewal date is earlier than ``before``."""
        pass

    @abstractmethod
    async def list_for_end_users(self) -> List[Subscription]:
        """Subscriptions owned by contacts."""
        pass

    @abstractmethod
    async def list_past_trial(self) -> List[Subscription]:
        """Cancelled subscriptions of the trial-capable line."""
        pass


@dataclass
class SubscriptionReferences:
    """Rows owned by the surrounding application, resolved for one subscription."""
    product: Product
    subscriber: Subscriber
    product_tier: Optional[ProductTier] = None
    payment_source: Optional[PaymentSource] = None
    campaign: Optional[Campaign] = None


ReferenceLoader = Callable[[ProductSubscriptionRecord], Awaitable[SubscriptionReferences]]


def to_record(subscription: Subscription) -> ProductSubscriptionRecord:
    return ProductSubscriptionRecord(id=subscription.id, **record_values(subscription))


def record_values(subscription: Subscription) -> dict:
    """Column values for ``subscription``, excluding the primary key."""
    markup = subscription.markup
    values = {
        'product_line': subscription.product_line.value,
        'product_id': subscription.product.id,
        'subscriber_type': subscription.subscriber.kind.value,
        'subscriber_id': subscription.subscriber.id,
        'state': subscription.state.value,
        'cycle_type': int(subscription.cycle_type),
        'product_tier_id': subscription.product_tier.id if subscription.product_tier else None,
        'payment_source_id': subscription.payment_source.id if subscription.payment_source else None,
        'campaign_id': subscription.campaign.id if subscription.campaign else None,
        'price': subscription.price,
        'markup_percentage': markup.percentage if markup else None,
        'markup_setup_fee': markup.setup_fee if markup else None,
        'markup_success_fee': markup.success_fee if markup else None,
        'markup_total': markup.total if markup else None,
        'stripe_subscription_id': subscription.provider_subscription_id,
        'activation_date': subscription.activation_date,
        'renewal_date': subscription.renewal_date,
        'canceled_at': subscription.canceled_at,
        'trial_ends_at': subscription.trial_ends_at,
        'deleted_at': subscription.deleted_at,
        'lock_version': subscription.lock_version,
    }
    if subscription.created_at is not None:
        values['created_at'] = subscription.created_at
    return values


def from_record(record: ProductSubscriptionRecord, refs: SubscriptionReferences) -> Subscription:
    markup = None
    if record.markup_percentage is not None or record.markup_total is not None:
        markup = Markup(
            percentage=record.markup_percentage or 0,
            setup_fee=record.markup_setup_fee or 0,
            success_fee=record.markup_success_fee or 0,
            total=record.markup_total or 0,
        )

    return Subscription(
        id=record.id,
        product_line=ProductLine(record.product_line),
        product=refs.product,
        subscriber=refs.subscriber,
        product_tier=refs.product_tier,
        payment_source=refs.payment_source,
        cycle_type=CycleType(record.cycle_type),
        state=SubscriptionState(record.state),
        price=record.price,
        markup=markup,
        campaign=refs.campaign,
        provider_subscription_id=record.stripe_subscription_id,
        activation_date=record.activation_date,
        renewal_date=record.renewal_date,
        canceled_at=record.canceled_at,
        trial_ends_at=record.trial_ends_at,
        created_at=record.created_at,
        deleted_at=record.deleted_at,
        lock_version=record.lock_version,
    )


class SqlAlchemySubscriptionRepository(SubscriptionRepository):
    """
    Subscription storage on the ``product_subscriptions`` table.

    Args:
        reference_loader: Resolves product, tier, subscriber, payment source
            and campaign for a stored row
        session_factory: Async session factory; defaults to the application's
    """

    def __init__(
        self,
        reference_loader: ReferenceLoader,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    ):
        if session_factory is None:
            from reseller.database.db import get_session_factory
            session_factory = get_session_factory()
        self.session_factory = session_factory
        self.reference_loader = reference_loader

    async def _to_domain(self, record: ProductSubscriptionRecord) -> Subscription:
        refs = await self.reference_loader(record)
        return from_record(record, refs)

    async def _list(self, *criteria) -> List[Subscription]:
        stmt = select(ProductSubscriptionRecord).where(
            ProductSubscriptionRecord.deleted_at.is_(None),
            *criteria
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            records = result.scalars().all()
        return [await self._to_domain(record) for record in records]

    async def add(self, subscription: Subscription) -> Subscription:
        async with self.session_factory() as session:
            session.add(to_record(subscription))
            await session.commit()
        logger.info(f"[REPO] Added subscription {subscription.id}")
        return subscription

    async def get(self, subscription_id: str, with_deleted: bool = False) -> Subscription:
        stmt = select(ProductSubscriptionRecord).where(ProductSubscriptionRecord.id == subscription_id)
        if not with_deleted:
            stmt = stmt.where(ProductSubscriptionRecord.deleted_at.is_(None))

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            record = result.scalar_one_or_none()

        if record is None:
            raise SubscriptionNotFoundError(subscription_id)
        return await self._to_domain(record)

    async def save(self, subscription: Subscription, expected_version: int) -> Subscription:
        values = record_values(subscription)
        values['lock_version'] = expected_version + 1

        stmt = (
            update(ProductSubscriptionRecord)
            .where(
                ProductSubscriptionRecord.id == subscription.id,
                ProductSubscriptionRecord.lock_version == expected_version
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                await session.rollback()
                logger.warning(
                    f"[REPO] Stale write for {subscription.id} at version {expected_version}"
                )
                raise StaleSubscriptionError(subscription.id, expected_version)
            await session.commit()

        subscription.lock_version = expected_version + 1
        return subscription

    async def has_invoices(self, subscription_id: str) -> bool:
        async with self.session_factory() as session:
            return await self._has_invoices(session, subscription_id)

    @staticmethod
    async def _has_invoices(session: AsyncSession, subscription_id: str) -> bool:
        stmt = select(
            select(SubscriptionInvoiceRecord.id)
            .where(SubscriptionInvoiceRecord.subscription_id == subscription_id)
            .exists()
        )
        result = await session.execute(stmt)
        return bool(result.scalar())

    async def soft_delete_if_allowed(self, subscription: Subscription, deleted_at: datetime) -> Subscription:
        record = ProductSubscriptionRecord
        invoiced = (
            select(SubscriptionInvoiceRecord.id)
            .where(SubscriptionInvoiceRecord.subscription_id == record.id)
            .exists()
        )
        stmt = (
            update(record)
            .where(
                record.id == subscription.id,
                record.deleted_at.is_(None),
                record.state != SubscriptionState.ACTIVE.value,
                ~invoiced
            )
            .values(deleted_at=deleted_at, lock_version=record.lock_version + 1)
            .execution_options(synchronize_session=False)
        )

        async with self.session_factory() as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                await session.rollback()
                await self._raise_delete_blocked(session, subscription.id)
            await session.commit()

        subscription.deleted_at = deleted_at
        subscription.lock_version += 1
        return subscription

    async def _raise_delete_blocked(self, session: AsyncSession, subscription_id: str) -> None:
        if await self._has_invoices(session, subscription_id):
            raise OutstandingInvoiceDeletionError(subscription_id)

        result = await session.execute(
            select(ProductSubscriptionRecord.state).where(
                ProductSubscriptionRecord.id == subscription_id,
                ProductSubscriptionRecord.deleted_at.is_(None)
            )
        )
        state = result.scalar_one_or_none()
        if state == SubscriptionState.ACTIVE.value:
            raise ActiveSubscriptionDeletionError(subscription_id)
        raise SubscriptionNotFoundError(subscription_id)

    async def list_active(self) -> List[Subscription]:
        return await self._list(ProductSubscriptionRecord.state == SubscriptionState.ACTIVE.value)

    async def list_inactive(self) -> List[Subscription]:
        return await self._list(ProductSubscriptionRecord.state != SubscriptionState.ACTIVE.value)

    async def list_up_for_renewal(self, before: datetime) -> List[Subscription]:
        return await self._list(ProductSubscriptionRecord.renewal_date < before)

    async def list_for_end_users(self) -> List[Subscription]:
        return await self._list(ProductSubscriptionRecord.subscriber_type == SubscriberKind.CONTACT.value)

    async def list_past_trial(self) -> List[Subscription]:
        return await self._list(
            ProductSubscriptionRecord.product_line == ProductLine.ZIPWHIP.value,
            ProductSubscriptionRecord.state == SubscriptionState.CANCELLED.value
        )
