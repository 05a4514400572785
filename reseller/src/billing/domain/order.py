"""
Order and Campaign Entities

Downstream work items created when a subscription is paid for.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderKind(str, Enum):
    VENDOR = "vendor"
    CAMPAIGN = "campaign"
    GBP_OPTIMIZATION = "gbp_optimization"
    WEBSITE_OPTIMIZATION = "website_optimization"


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    FAILED = "failed"
    CANCELLED = "cancelled"


OPEN_ORDER_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.ACTIVE})


@dataclass
class Order:
    id: str
    subscription_id: str
    kind: OrderKind
    status: OrderStatus = OrderStatus.PENDING
    cancelation_support_email: Optional[str] = None

    def is_open(self) -> bool:
        return self.status in OPEN_ORDER_STATUSES

    def is_active(self) -> bool:
        return self.status == OrderStatus.ACTIVE


@dataclass
class Campaign:
    """
    Brand campaign submitted to the approval workflow.

    Attributes:
        campaign_code: Code the approval workflow knows the campaign by
        customer_id: Customer reference sent alongside the code
        submitted_at: When the workflow acknowledged the submission
    """
    id: str
    subscription_id: str
    campaign_code: str
    customer_id: str
    submitted_at: Optional[datetime] = None
