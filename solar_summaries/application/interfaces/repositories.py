"""
Datastore interface (port) for the summary tables.

The aggregators receive an implementation explicitly instead of reaching
for a global client.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional, Sequence

from ...domain.entities.summary import DailySummary, JobRunLog, LiveReading, MonthlySummary


class SummaryStore(ABC):
    """
    Query/upsert contract over live readings and summary tables.

    Implementations raise DatastoreException for any read or write that
    fails. Each write is committed on its own.
    """

    @abstractmethod
    async def list_device_serials(self) -> List[str]:
        """
        Distinct non-empty device serials seen in live readings or daily summaries.

        Returns:
            Sorted list of serials
        """
        pass

    @abstractmethod
    async def list_daily_summary_serials(self) -> List[str]:
        """Distinct non-empty device serials present in daily summaries."""
        pass

    @abstractmethod
    async def get_live_readings(
        self,
        serial: str,
        start: datetime,
        end: datetime
    ) -> List[LiveReading]:
        """
        Get live readings of a device in a half-open window.

        Args:
            serial: Device serial
            start: Inclusive UTC start
            end: Exclusive UTC end

        Returns:
            Readings ordered by timestamp
        """
        pass

    @abstractmethod
    async def get_daily_summaries(
        self,
        serial: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[DailySummary]:
        """Daily summaries of a device, ordered by date. Bounds are inclusive."""
        pass

    @abstractmethod
    async def get_monthly_summaries(
        self,
        serial: str,
        start_month: Optional[str] = None,
        end_month: Optional[str] = None
    ) -> List[MonthlySummary]:
        """Monthly summaries of a device, ordered by month. Bounds are inclusive."""
        pass

    @abstractmethod
    async def upsert_daily_summaries(self, summaries: Sequence[DailySummary]) -> int:
        """
        Insert or update daily summaries keyed by (device_serial, summary_date).

        Returns:
            Number of rows written
        """
        pass

    @abstractmethod
    async def upsert_monthly_summaries(self, summaries: Sequence[MonthlySummary]) -> int:
        """
        Insert or update monthly summaries keyed by (device_serial, summary_month).

        Returns:
            Number of rows written
        """
        pass

    @abstractmethod
    async def prune_live_readings(self, older_than: datetime) -> int:
        """
        Delete live readings with a timestamp before the given instant.

        Returns:
            Number of rows deleted
        """
        pass

    @abstractmethod
    async def record_job_run(self, entry: JobRunLog) -> None:
        """Append one job run record."""
        pass
