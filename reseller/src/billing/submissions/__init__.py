from .client import SubmitService

__all__ = ['SubmitService']
