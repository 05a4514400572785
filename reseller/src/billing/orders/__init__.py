from .interfaces import OrderServiceInterface
from .orchestrator import BrandOrderOrchestrator, OrderOrchestrator

__all__ = [
    'OrderServiceInterface',
    'OrderOrchestrator',
    'BrandOrderOrchestrator',
]
