"""
Test data factories for solar summaries.
"""
from .summary_factory import LiveReadingFactory, DailySummaryFactory, MonthlySummaryFactory
from .user_factory import ClerkUserPayloadFactory, IdentityUserFactory

__all__ = [
    "LiveReadingFactory",
    "DailySummaryFactory",
    "MonthlySummaryFactory",
    "ClerkUserPayloadFactory",
    "IdentityUserFactory",
]
