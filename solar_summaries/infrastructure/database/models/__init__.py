"""
SQLAlchemy ORM models.
"""
from .summary_model import (
    LiveReadingModel,
    DailySummaryModel,
    MonthlySummaryModel,
    ApiLogModel,
)

__all__ = [
    'LiveReadingModel',
    'DailySummaryModel',
    'MonthlySummaryModel',
    'ApiLogModel',
]
