"""
Application interfaces (ports).
"""
from .repositories import SummaryStore
from .services import IdentityProvider

__all__ = ['SummaryStore', 'IdentityProvider']
