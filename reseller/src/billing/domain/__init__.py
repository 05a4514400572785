from .catalog import Markup, PaymentSource, Product, ProductTier
from .order import Campaign, Order, OrderKind, OrderStatus, OPEN_ORDER_STATUSES
from .product_line import ProductLine, ProductLineTraits, get_traits
from .subscriber import Contact, Subscriber, SubscriberKind, SubscriptionSubscriber, User, owning_user
from .subscription import CycleType, Subscription, SubscriptionEvent, SubscriptionState

__all__ = [
    'Markup', 'PaymentSource', 'Product', 'ProductTier',
    'Campaign', 'Order', 'OrderKind', 'OrderStatus', 'OPEN_ORDER_STATUSES',
    'ProductLine', 'ProductLineTraits', 'get_traits',
    'Contact', 'Subscriber', 'SubscriberKind', 'SubscriptionSubscriber', 'User', 'owning_user',
    'CycleType', 'Subscription', 'SubscriptionEvent', 'SubscriptionState',
]
