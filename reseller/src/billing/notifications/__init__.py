from .interfaces import NotificationSinkInterface

__all__ = ['NotificationSinkInterface']
