"""Reseller subscription backend.

Lifecycle management for resold third-party product subscriptions: billing
provider state, downstream orders and the external approval workflow.
"""

__version__ = '0.4.0'
