"""
Domain services: pure aggregation and calendar logic.
"""
from .bucketing import bucket_and_reduce, SumMaxReducer
from .local_time import (
    get_zone,
    to_local_date,
    local_day_bounds,
    local_range_bounds,
    local_today,
    is_day_finalized,
    date_range,
    trailing_dates,
    month_key,
)

__all__ = [
    'bucket_and_reduce',
    'SumMaxReducer',
    'get_zone',
    'to_local_date',
    'local_day_bounds',
    'local_range_bounds',
    'local_today',
    'is_day_finalized',
    'date_range',
    'trailing_dates',
    'month_key',
]
