"""Shared fixtures: in-memory collaborators for the subscription core."""

import copy
from datetime import datetime, timezone
from typing import Dict, List, Optional

import pytest

from reseller.src.billing.domain import (
    Markup,
    Order,
    OrderKind,
    OrderStatus,
    PaymentSource,
    Product,
    ProductLine,
    ProductTier,
    Subscription,
    SubscriptionState,
    User,
)
from reseller.src.billing.notifications import NotificationSinkInterface
from reseller.src.billing.orders import OrderServiceInterface
from reseller.src.billing.payments import (
    BillingGatewayAdapter,
    BillingGatewayInterface,
    ProviderSubscription,
)
from reseller.src.billing.shared.exceptions import (
    ActiveSubscriptionDeletionError,
    OutstandingInvoiceDeletionError,
    StaleSubscriptionError,
    SubscriptionNotFoundError,
)
from reseller.src.billing.subscriptions import SubscriptionRepository, SubscriptionService
from reseller.src.billing.subscriptions.state_machine import SubscriptionStateMachine

FIXED_NOW = datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)


class InMemorySubscriptionRepository(SubscriptionRepository):
    """Stores deep copies so callers never share state with the store."""

    def __init__(self):
        self.rows: Dict[str, Subscription] = {}
        self.invoices: Dict[str, int] = {}
        self.save_count = 0

    def seed(self, subscription: Subscription) -> Subscription:
        self.rows[subscription.id] = copy.deepcopy(subscription)
        return subscription

    def stored(self, subscription_id: str) -> Subscription:
        return self.rows[subscription_id]

    def add_invoice(self, subscription_id: str) -> None:
        self.invoices[subscription_id] = self.invoices.get(subscription_id, 0) + 1

    async def add(self, subscription):
        return self.seed(subscription)

    async def get(self, subscription_id, with_deleted=False):
        row = self.rows.get(subscription_id)
        if row is None or (row.deleted_at is not None and not with_deleted):
            raise SubscriptionNotFoundError(subscription_id)
        return copy.deepcopy(row)

    async def save(self, subscription, expected_version):
        row = self.rows.get(subscription.id)
        if row is None or row.lock_version != expected_version:
            raise StaleSubscriptionError(subscription.id, expected_version)
        subscription.lock_version = expected_version + 1
        self.rows[subscription.id] = copy.deepcopy(subscription)
        self.save_count += 1
        return subscription

    async def has_invoices(self, subscription_id):
        return self.invoices.get(subscription_id, 0) > 0

    async def soft_delete_if_allowed(self, subscription, deleted_at):
        row = self.rows.get(subscription.id)
        if row is None or row.deleted_at is not None:
            raise SubscriptionNotFoundError(subscription.id)
        if await self.has_invoices(subscription.id):
            raise OutstandingInvoiceDeletionError(subscription.id)
        if row.state == SubscriptionState.ACTIVE:
            raise ActiveSubscriptionDeletionError(subscription.id)
        row.deleted_at = deleted_at
        row.lock_version += 1
        subscription.deleted_at = deleted_at
        subscription.lock_version = row.lock_version
        return subscription

    def _visible(self) -> List[Subscription]:
        return [copy.deepcopy(row) for row in self.rows.values() if row.deleted_at is None]

    async def list_active(self):
        return [s for s in self._visible() if s.state == SubscriptionState.ACTIVE]

    async def list_inactive(self):
        return [s for s in self._visible() if s.state != SubscriptionState.ACTIVE]

    async def list_up_for_renewal(self, before):
        return [s for s in self._visible() if s.renewal_date and s.renewal_date < before]

    async def list_for_end_users(self):
        return [s for s in self._visible() if s.subscriber.kind.value == 'Contact']

    async def list_past_trial(self):
        return [
            s for s in self._visible()
            if s.product_line == ProductLine.ZIPWHIP and s.state == SubscriptionState.CANCELLED
        ]


class InMemoryOrderService(OrderServiceInterface):

    def __init__(self):
        self.orders: List[Order] = []
        self.created: List[Order] = []
        self.cancelled: List[Order] = []
        self.fail_on_create: Optional[Exception] = None

    def add(self, subscription_id: str, kind: OrderKind, status: OrderStatus, **kwargs) -> Order:
        order = Order(
            id=f"order-{len(self.orders) + 1}",
            subscription_id=subscription_id,
            kind=kind,
            status=status,
            **kwargs
        )
        self.orders.append(order)
        return order

    def of_kind(self, kind: OrderKind) -> List[Order]:
        return [o for o in self.orders if o.kind == kind]

    async def find_open_order(self, subscription_id, kind):
        for order in reversed(self.orders):
            if order.subscription_id == subscription_id and order.kind == kind and order.is_open():
                return order
        return None

    async def latest_order(self, subscription_id, kind):
        for order in reversed(self.orders):
            if order.subscription_id == subscription_id and order.kind == kind:
                return order
        return None

    async def create_order(self, subscription, kind):
        if self.fail_on_create is not None:
            raise self.fail_on_create
        order = self.add(subscription.id, kind, OrderStatus.PENDING)
        self.created.append(order)
        return order

    async def cancel_order(self, order):
        order.status = OrderStatus.CANCELLED
        self.cancelled.append(order)
        return order


class RecordingNotificationSink(NotificationSinkInterface):

    def __init__(self):
        self.internal_cancelations: List[str] = []
        self.vendor_cancelations: List[str] = []
        self.external_payments: List[str] = []

    async def internal_cancelation_notification(self, subscription):
        self.internal_cancelations.append(subscription.id)

    async def vendor_subscription_cancelled(self, subscription, order):
        self.vendor_cancelations.append(order.cancelation_support_email)

    async def external_payment_notification(self, subscription):
        self.external_payments.append(subscription.id)


class FakeBillingGateway(BillingGatewayInterface):
    """
    Provider double; ``create_status`` controls what new subscriptions report.

    A repeated idempotency key replays the subscription created for it, as Stripe does.
    """

    def __init__(self, create_status: str = 'active'):
        self.create_status = create_status
        self.statuses: Dict[str, str] = {}
        self.created_by_key: Dict[str, ProviderSubscription] = {}
        self.created_count = 0
        self.create_calls: List[dict] = []
        self.cancel_calls: List[str] = []
        self.charges: List[dict] = []
        self.source_updates: List[tuple] = []
        self.plan_changes: List[tuple] = []

    async def create_subscription(self, customer_ref, plan_id, metadata, idempotency_key=None):
        self.create_calls.append({
            'customer_ref': customer_ref,
            'plan_id': plan_id,
            'metadata': metadata,
            'idempotency_key': idempotency_key,
        })
        if idempotency_key in self.created_by_key:
            return self.created_by_key[idempotency_key]

        self.created_count += 1
        created = ProviderSubscription(id=f"sub_{self.created_count}", status=self.create_status)
        self.statuses[created.id] = self.create_status
        if idempotency_key:
            self.created_by_key[idempotency_key] = created
        return created

    async def retrieve_subscription(self, provider_id):
        return ProviderSubscription(id=provider_id, status=self.statuses.get(provider_id, 'active'))

    async def cancel_subscription(self, provider_id):
        if self.statuses.get(provider_id) == 'canceled':
            return False
        self.statuses[provider_id] = 'canceled'
        self.cancel_calls.append(provider_id)
        return True

    async def create_one_time_charge(self, customer_ref, amount_minor_units, currency, description,
                                     idempotency_key=None):
        self.charges.append({
            'customer_ref': customer_ref,
            'amount': amount_minor_units,
            'currency': currency,
            'description': description,
        })
        return f"ii_{len(self.charges)}"

    async def update_default_source(self, provider_id, source_id):
        self.source_updates.append((provider_id, source_id))

    async def change_plan(self, provider_id, plan_id):
        self.plan_changes.append((provider_id, plan_id))


@pytest.fixture
def repository():
    return InMemorySubscriptionRepository()


@pytest.fixture
def order_service():
    return InMemoryOrderService()


@pytest.fixture
def notifications():
    return RecordingNotificationSink()


@pytest.fixture
def gateway():
    return FakeBillingGateway()


@pytest.fixture
def adapter(gateway):
    return BillingGatewayAdapter(gateway)


@pytest.fixture
def state_machine(repository, adapter, order_service, notifications):
    return SubscriptionStateMachine(
        repository=repository,
        gateway=adapter,
        order_service=order_service,
        notifications=notifications,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def service(repository, adapter, order_service, notifications):
    return SubscriptionService(
        repository=repository,
        gateway=adapter,
        order_service=order_service,
        notifications=notifications,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def tier():
    return ProductTier(
        id='tier-basic',
        title='Basic',
        cost=1000,
        yearly_cost=12000,
        setup_fee=0,
        stripe_monthly_plan_id='plan_monthly',
        stripe_yearly_plan_id='plan_yearly',
    )


@pytest.fixture
def product(tier):
    return Product(id='prod-1', name='Listings', product_tiers=[tier])


@pytest.fixture
def reseller_user():
    return User(id='user-1', email='reseller@example.com')


@pytest.fixture
def make_subscription(repository, product, tier, reseller_user):
    """Build a subscription; stored in the repository unless ``store=False``."""
    counter = {'n': 0}

    def factory(store: bool = True, **overrides) -> Subscription:
        counter['n'] += 1
        fields = {
            'id': f"sub-{counter['n']}",
            'product_line': ProductLine.GENERIC,
            'product': product,
            'subscriber': reseller_user,
            'product_tier': tier,
            'payment_source': PaymentSource(id='ps-1', stripe_id='cus_123', stripe_source_id='src_1',
                                            email='billing@example.com'),
        }
        fields.update(overrides)
        subscription = Subscription(**fields)
        if store:
            repository.seed(subscription)
        return subscription

    return factory


@pytest.fixture
def markup():
    return Markup(percentage=20, setup_fee=50, success_fee=0)
