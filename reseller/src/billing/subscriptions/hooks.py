"""
Transition Hooks

After-transition actions. Each hook receives the ``TransitionContext`` and
mutates only ``ctx.subscription`` (the working copy); external effects go
through the gateway adapter, the order orchestrator and the notification sink.
"""

import logging

from reseller.utils.timezone import timezone
from .transitions import TransitionContext

logger = logging.getLogger(__name__)


async def create_on_stripe(ctx: TransitionContext) -> None:
    await ctx.gateway.create_subscription(ctx.subscription)


async def set_subscription_dates(ctx: TransitionContext) -> None:
    """Activation now; renewal one month out for monthly billing, one year otherwise."""
    subscription = ctx.subscription
    subscription.activation_date = ctx.now
    if subscription.monthly:
        subscription.renewal_date = timezone.add_months(ctx.now, 1)
    else:
        subscription.renewal_date = timezone.add_years(ctx.now, 1)


async def create_order(ctx: TransitionContext) -> None:
    await ctx.orders.create_order(ctx.subscription)


async def create_bundled_orders(ctx: TransitionContext) -> None:
    await ctx.orders.create_bundled_orders(ctx.subscription)


async def cancel_stripe_subscription(ctx: TransitionContext) -> None:
    await ctx.gateway.cancel_subscription(ctx.subscription)


async def send_cancelation_email(ctx: TransitionContext) -> None:
    """Internal notice always; vendor notice only when the order names a support address."""
    subscription = ctx.subscription
    await ctx.notifications.internal_cancelation_notification(subscription)

    order = await ctx.orders.primary_order(subscription)
    if order is None or not order.cancelation_support_email:
        return

    await ctx.notifications.vendor_subscription_cancelled(subscription, order)
    logger.info(f"[FSM] Vendor notified of cancellation at {order.cancelation_support_email}")


async def cancel_order(ctx: TransitionContext) -> None:
    await ctx.orders.cancel_order(ctx.subscription)


async def set_canceled_at(ctx: TransitionContext) -> None:
    ctx.subscription.canceled_at = ctx.now


SET_PAYMENT_HOOKS = (
    create_on_stripe,
    set_subscription_dates,
    create_order,
    create_bundled_orders,
)

CANCEL_HOOKS = (
    cancel_stripe_subscription,
    send_cancelation_email,
    cancel_order,
    set_canceled_at,
)

RESET_SUBMISSION_HOOKS = (create_order,)
