"""
Monthly summary aggregation.

Months are derived only from daily summaries: total energy is the sum of
the daily totals and the peak is the largest daily peak.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from ...domain.entities.summary import (
    JobEndpoint,
    JobRunLog,
    MonthlyRunResult,
    MonthlySummary,
    round2,
)
from ...domain.exceptions import DatastoreException
from ...domain.services.bucketing import SumMaxReducer, bucket_and_reduce
from ...domain.services.local_time import month_key
from ..interfaces.repositories import SummaryStore

logger = logging.getLogger(__name__)


class MonthlySummaryService:
    """Recomputes every month of every device that has daily summaries."""

    def __init__(
        self,
        store: SummaryStore,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self._clock = clock
        self._reducer = SumMaxReducer(
            sum_fields={'total': 'total_generation_kwh'},
            max_fields={'peak': 'peak_power_kw'},
        )

    async def run(self, serials: Optional[Sequence[str]] = None) -> MonthlyRunResult:
        """
        Rebuild monthly summaries.

        A device's months are upserted in one batch once all of its daily
        rows have been read. Failures are isolated per device.
        """
        result = MonthlyRunResult()

        if serials is None:
            try:
                serials = await self.store.list_daily_summary_serials()
            except DatastoreException as e:
                logger.error(f"Failed to list devices with daily summaries: {e}")
                result.error = e.message
                await self._record(result)
                return result

        devices = [serial for serial in dict.fromkeys(serials) if serial]
        result.devices = len(devices)
        if not devices:
            logger.info("No daily summaries found, nothing to roll up")

        for serial in devices:
            result.total_upserted += await self._process_device(serial, result)

        logger.info(
            f"Monthly summaries done: {result.devices} devices, "
            f"{result.total_upserted} rows upserted, {len(result.failed_devices)} failed"
        )
        if result.failed_devices:
            result.error = f"Failed devices: {', '.join(result.failed_devices)}"
        await self._record(result)
        return result

    async def _process_device(self, serial: str, result: MonthlyRunResult) -> int:
        try:
            daily_rows = await self.store.get_daily_summaries(serial)
        except DatastoreException as e:
            logger.error(f"Failed to read daily summaries for {serial}: {e}")
            result.failed_devices.append(serial)
            return 0

        if not daily_rows:
            logger.info(f"No daily summaries for {serial}")
            return 0

        buckets = bucket_and_reduce(
            daily_rows,
            key_fn=lambda row: month_key(row.summary_date),
            init_fn=self._reducer.init,
            reduce_fn=self._reducer.reduce,
        )
        now = self._clock()
        months = [
            MonthlySummary(
                device_serial=serial,
                summary_month=month,
                total_generation_kwh=round2(acc['total']),
                peak_power_kw=round2(acc['peak']),
                updated_at=now,
            )
            for month, acc in buckets.items()
        ]

        try:
            await self.store.upsert_monthly_summaries(months)
        except DatastoreException as e:
            logger.error(f"Failed to upsert monthly summaries for {serial}: {e}")
            result.failed_devices.append(serial)
            return 0

        logger.debug(f"Upserted {len(months)} monthly summaries for {serial}")
        return len(months)

    async def _record(self, result: MonthlyRunResult) -> None:
        if result.ok:
            endpoint = JobEndpoint.MONTHLY_SUCCESS
            message = f"Upserted {result.total_upserted} monthly summaries"
        else:
            endpoint = JobEndpoint.MONTHLY_FAILED
            message = result.error or "Monthly summary run failed"
        try:
            await self.store.record_job_run(JobRunLog(
                endpoint=endpoint.value,
                success=result.ok,
                message=message,
                created_at=self._clock(),
            ))
        except DatastoreException as e:
            logger.warning(f"Failed to record job run: {e}")
