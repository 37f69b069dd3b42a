"""
Domain entities.
"""
from .summary import (
    round2,
    SkipReason,
    JobEndpoint,
    LiveReading,
    DailySummary,
    MonthlySummary,
    JobRunLog,
    DailyRunResult,
    MonthlyRunResult,
)
from .user import IdentityUser, UserRole, DEFAULT_ROLE, DEFAULT_DASHBOARD_ACCESS

__all__ = [
    'round2',
    'SkipReason',
    'JobEndpoint',
    'LiveReading',
    'DailySummary',
    'MonthlySummary',
    'JobRunLog',
    'DailyRunResult',
    'MonthlyRunResult',
    'IdentityUser',
    'UserRole',
    'DEFAULT_ROLE',
    'DEFAULT_DASHBOARD_ACCESS',
]
