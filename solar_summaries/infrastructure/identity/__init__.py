"""
Identity provider adapters.
"""
from .clerk_client import ClerkClient, user_from_payload

__all__ = ['ClerkClient', 'user_from_payload']
