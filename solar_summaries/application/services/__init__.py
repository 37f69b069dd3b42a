"""
Application services.
"""
from .daily_summary_service import DailySummaryService
from .monthly_summary_service import MonthlySummaryService
from .admin_user_service import AdminUserService

__all__ = ['DailySummaryService', 'MonthlySummaryService', 'AdminUserService']
