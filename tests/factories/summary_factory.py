"""
Telemetry and summary test data factories.
"""
from datetime import date, datetime, timezone

import factory

from solar_summaries.domain.entities.summary import DailySummary, LiveReading, MonthlySummary


class LiveReadingFactory(factory.Factory):
    """
    Factory for live inverter readings.

    Usage:
        reading = LiveReadingFactory(timestamp=local_dt(2024, 3, 9, 10))
        reading = LiveReadingFactory(generation_today_kwh=None)
    """

    class Meta:
        model = LiveReading

    device_serial = factory.Sequence(lambda n: f"INV-{n:04d}")
    timestamp = factory.LazyFunction(lambda: datetime(2024, 3, 9, 6, 30, tzinfo=timezone.utc))
    generation_today_kwh = 5.0
    power_kw = 2.5


class DailySummaryFactory(factory.Factory):
    """Factory for daily summary rows."""

    class Meta:
        model = DailySummary

    device_serial = factory.Sequence(lambda n: f"INV-{n:04d}")
    summary_date = date(2024, 3, 9)
    total_generation_kwh = 12.5
    peak_power_kw = 4.2
    created_at = factory.LazyFunction(lambda: datetime(2024, 3, 10, 0, 5, tzinfo=timezone.utc))


class MonthlySummaryFactory(factory.Factory):
    """Factory for monthly summary rows."""

    class Meta:
        model = MonthlySummary

    device_serial = factory.Sequence(lambda n: f"INV-{n:04d}")
    summary_month = "2024-03"
    total_generation_kwh = 310.0
    peak_power_kw = 5.1
