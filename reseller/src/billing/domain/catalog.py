"""
Catalog Entities

Products, tiers, markups and payment sources referenced by a subscription.
Costs on tiers and products are in cents; markup amounts are in dollars.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ProductTier:
    """
    A priced tier of a product.

    Attributes:
        id: Tier ID
        title: Display title (Brand uses it to detect bundled optimizations)
        cost: Monthly wholesale cost in cents
        yearly_cost: Yearly wholesale cost in cents
        setup_fee: One-time setup fee in cents
        stripe_monthly_plan_id: Provider plan for monthly and monthly-commitment cycles
        stripe_yearly_plan_id: Provider plan for yearly cycles
        wholesale: Whether the tier is part of the wholesale ladder
    """
    id: str
    title: str = ''
    cost: int = 0
    yearly_cost: int = 0
    setup_fee: int = 0
    stripe_monthly_plan_id: Optional[str] = None
    stripe_yearly_plan_id: Optional[str] = None
    wholesale: bool = True


@dataclass
class Product:
    id: str
    name: str = ''
    product_tiers: List[ProductTier] = field(default_factory=list)
    one_time_fee: int = 0
    one_time_fee_description: Optional[str] = None
    charge_one_time_fee: bool = False

    def wholesale_tiers(self) -> List[ProductTier]:
        """Wholesale tiers in catalog order."""
        return [tier for tier in self.product_tiers if tier.wholesale]

    def wholesale_rank(self, tier: ProductTier) -> Optional[int]:
        """Zero-based position of ``tier`` among the wholesale tiers."""
        ids = [t.id for t in self.wholesale_tiers()]
        return ids.index(tier.id) if tier.id in ids else None


@dataclass
class Markup:
    """
    The reseller's margin over the wholesale price.

    ``total`` is derived: wholesale * (100 + percentage) / 100.
    """
    percentage: int = 0
    setup_fee: int = 0
    success_fee: int = 0
    total: int = 0


@dataclass
class PaymentSource:
    id: str
    stripe_id: Optional[str] = None
    stripe_source_id: Optional[str] = None
    email: Optional[str] = None
