"""
Daily summary aggregation.

Rolls live inverter readings up into one row per device and local calendar
day. The day's energy is the largest reading of the cumulative
generation-today counter and the peak is the largest instantaneous power.
Today's bucket is left alone until the local finalization cutoff.
"""
import logging
import time as time_module
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from ...config import AggregationSettings
from ...domain.entities.summary import (
    DailyRunResult,
    DailySummary,
    JobEndpoint,
    JobRunLog,
    SkipReason,
    round2,
)
from ...domain.exceptions import DatastoreException, ValidationException
from ...domain.services.bucketing import SumMaxReducer, bucket_and_reduce
from ...domain.services.local_time import (
    date_range,
    get_zone,
    is_day_finalized,
    local_range_bounds,
    local_today,
    to_local_date,
    trailing_dates,
)
from ..interfaces.repositories import SummaryStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DailySummaryService:
    """
    Builds DailySummary rows from LiveReading rows.

    Every device is processed independently: a device whose reads fail is
    reported in the result and the run moves on to the next one. Each day
    is upserted on its own so a failed write only loses that day.
    """

    def __init__(
        self,
        store: SummaryStore,
        settings: AggregationSettings,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the service.

        Args:
            store: Datastore holding live readings and summaries
            settings: Aggregation settings (timezones, cutoff, windows)
            clock: Returns the current UTC instant

        Raises:
            ConfigurationException: If a configured timezone is unknown
        """
        self.store = store
        self.settings = settings
        self._clock = clock
        self._reducer = SumMaxReducer(
            max_fields={'total': 'generation_today_kwh', 'peak': 'power_kw'},
        )

        # Fail on bad timezone names before any work starts
        get_zone(settings.default_timezone)
        for name in settings.device_timezones.values():
            get_zone(name)

    # =========================================================================
    # Entry points
    # =========================================================================

    async def run_scheduled(self) -> DailyRunResult:
        """
        Scheduled run: yesterday and today, then prune old live readings.
        """
        result = await self.run(days_back=self.settings.scheduled_days)
        if result.ok and self.settings.prune_enabled and not result.dry_run:
            await self._prune(result)
        await self._record(result)
        return result

    async def run_backfill(
        self,
        days_back: Optional[int] = None,
        serials: Optional[Sequence[str]] = None,
        only_missing: bool = False,
        dry_run: bool = False,
    ) -> DailyRunResult:
        """Backfill the trailing window of local days, today included."""
        result = await self.run(
            days_back=days_back if days_back is not None else self.settings.backfill_days,
            serials=serials,
            only_missing=only_missing,
            dry_run=dry_run,
        )
        await self._record(result)
        return result

    async def run_range(
        self,
        start_date: date,
        end_date: date,
        serials: Optional[Sequence[str]] = None,
        only_missing: bool = True,
        dry_run: bool = False,
    ) -> DailyRunResult:
        """Backfill an explicit inclusive date range. Only missing days by default."""
        result = await self.run(
            serials=serials,
            start_date=start_date,
            end_date=end_date,
            only_missing=only_missing,
            dry_run=dry_run,
        )
        await self._record(result)
        return result

    # =========================================================================
    # Core
    # =========================================================================

    async def run(
        self,
        days_back: Optional[int] = None,
        serials: Optional[Sequence[str]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        only_missing: bool = False,
        dry_run: bool = False,
    ) -> DailyRunResult:
        """
        Compute and upsert daily summaries.

        Args:
            days_back: Size of the trailing window ending at each device's local today
            serials: Devices to process (default: every known device)
            start_date: Inclusive start of an explicit range
            end_date: Inclusive end of an explicit range
            only_missing: Never overwrite an existing row
            dry_run: Count what would be written without writing

        Returns:
            Counts of inserted, updated, unchanged, skipped and failed days

        Raises:
            ValidationException: If the date arguments are inconsistent
        """
        if (start_date is None) != (end_date is None):
            raise ValidationException(
                "start_date and end_date must be given together",
                errors={'start_date': ['required with end_date']},
            )
        if start_date and end_date and end_date < start_date:
            raise ValidationException(
                "end_date must not precede start_date",
                errors={'end_date': ['before start_date']},
            )
        if start_date is None:
            if days_back is None:
                days_back = self.settings.backfill_days
            if days_back < 1:
                raise ValidationException(
                    "days_back must be at least 1",
                    errors={'days_back': ['must be >= 1']},
                )

        result = DailyRunResult(dry_run=dry_run)
        started = time_module.monotonic()
        now = self._clock()

        if serials is None:
            try:
                serials = await self.store.list_device_serials()
            except DatastoreException as e:
                logger.error(f"Failed to list devices: {e}")
                result.error = e.message
                return result

        devices = [serial for serial in dict.fromkeys(serials) if serial]
        result.devices = len(devices)
        if not devices:
            logger.info("No devices found, nothing to summarize")
            return result

        zones = {serial: get_zone(self.settings.timezone_for(serial)) for serial in devices}

        for serial in devices:
            tz = zones[serial]
            if start_date is not None:
                dates = date_range(start_date, end_date)
            else:
                dates = trailing_dates(local_today(now, tz), days_back)
            await self._process_device(serial, tz, dates, now, result, only_missing, dry_run)

        duration = time_module.monotonic() - started
        logger.info(
            f"Daily summaries done in {duration:.2f}s: "
            f"{result.devices} devices, {result.inserted} inserted, "
            f"{result.updated} updated, {result.unchanged} unchanged, "
            f"{sum(result.skipped.values())} skipped, {result.failed} failed"
            + (" (dry run)" if dry_run else "")
        )
        if result.failed_devices:
            logger.warning(f"Failed devices: {', '.join(result.failed_devices)}")
        return result

    async def _process_device(
        self,
        serial: str,
        tz: ZoneInfo,
        dates: List[date],
        now: datetime,
        result: DailyRunResult,
        only_missing: bool,
        dry_run: bool,
    ) -> None:
        if not dates:
            return

        window_start, window_end = local_range_bounds(dates[0], dates[-1], tz)
        try:
            readings = await self.store.get_live_readings(serial, window_start, window_end)
            existing_rows = await self.store.get_daily_summaries(serial, dates[0], dates[-1])
        except DatastoreException as e:
            logger.error(f"Failed to read data for device {serial}: {e}")
            result.failed += len(dates)
            result.mark_device_failed(serial)
            return

        buckets = bucket_and_reduce(
            readings,
            key_fn=lambda reading: to_local_date(reading.timestamp, tz),
            init_fn=self._reducer.init,
            reduce_fn=self._reducer.reduce,
        )
        existing: Dict[date, DailySummary] = {row.summary_date: row for row in existing_rows}

        for day in dates:
            acc = buckets.get(day)
            if acc is None:
                result.skip(SkipReason.NO_DATA)
                continue

            if not is_day_finalized(day, now, tz, self.settings.finalize_cutoff):
                logger.debug(f"Skipping {serial} {day}: day still in progress")
                result.skip(SkipReason.IN_PROGRESS)
                continue

            current = existing.get(day)
            if only_missing and current is not None:
                result.skip(SkipReason.EXISTING)
                continue

            summary = DailySummary(
                device_serial=serial,
                summary_date=day,
                total_generation_kwh=round2(acc['total']),
                peak_power_kw=round2(acc['peak']),
            )
            if current is not None and current.same_values(summary):
                result.unchanged += 1
                continue

            if not dry_run:
                try:
                    await self.store.upsert_daily_summaries([summary])
                except DatastoreException as e:
                    logger.error(f"Failed to upsert daily summary {serial} {day}: {e}")
                    result.failed += 1
                    result.mark_device_failed(serial)
                    continue

            if current is None:
                result.inserted += 1
            else:
                result.updated += 1

    # =========================================================================
    # Housekeeping
    # =========================================================================

    async def _prune(self, result: DailyRunResult) -> None:
        cutoff = self._clock() - timedelta(days=self.settings.live_retention_days)
        try:
            result.pruned = await self.store.prune_live_readings(cutoff)
            logger.info(f"Pruned {result.pruned} live readings older than {cutoff.isoformat()}")
        except DatastoreException as e:
            logger.warning(f"Failed to prune live readings: {e}")

    async def _record(self, result: DailyRunResult) -> None:
        if result.dry_run:
            return
        if not result.ok:
            endpoint = JobEndpoint.DAILY_FAILED
            message = result.error or f"Failed devices: {', '.join(result.failed_devices)}"
        elif result.written == 0 and result.unchanged == 0:
            endpoint = JobEndpoint.DAILY_NO_DATA
            message = "No finalized daily data to summarize"
        else:
            endpoint = JobEndpoint.DAILY_SUCCESS
            message = (
                f"Processed {result.devices} devices: {result.inserted} inserted, "
                f"{result.updated} updated, {result.unchanged} unchanged"
            )
        try:
            await self.store.record_job_run(JobRunLog(
                endpoint=endpoint.value,
                success=result.ok,
                message=message,
                created_at=self._clock(),
            ))
        except DatastoreException as e:
            logger.warning(f"Failed to record job run: {e}")
