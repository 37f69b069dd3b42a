"""
Repository for live readings and summary tables.

Implements the SummaryStore port on PostgreSQL with ON CONFLICT upserts.
"""
import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import and_, delete, insert, select, union
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.summary_model import (
    ApiLogModel,
    DailySummaryModel,
    LiveReadingModel,
    MonthlySummaryModel,
)
from ....application.interfaces.repositories import SummaryStore
from ....domain.entities.summary import DailySummary, JobRunLog, LiveReading, MonthlySummary
from ....domain.exceptions import DatastoreException

logger = logging.getLogger(__name__)


def _serial_filter(column):
    return and_(column.is_not(None), column != "")


class SummaryRepository(SummaryStore):
    """
    SQLAlchemy implementation of SummaryStore.

    Every write commits immediately. A failed read or write rolls the session
    back and surfaces as DatastoreException so callers can isolate it.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # =========================================================================
    # Reads
    # =========================================================================

    async def list_device_serials(self) -> List[str]:
        query = union(
            select(LiveReadingModel.inverter_sn).where(_serial_filter(LiveReadingModel.inverter_sn)),
            select(DailySummaryModel.inverter_sn).where(_serial_filter(DailySummaryModel.inverter_sn)),
        )
        result = await self._read("list_device_serials", query)
        return sorted(row[0] for row in result.all())

    async def list_daily_summary_serials(self) -> List[str]:
        query = (
            select(DailySummaryModel.inverter_sn)
            .where(_serial_filter(DailySummaryModel.inverter_sn))
            .distinct()
            .order_by(DailySummaryModel.inverter_sn)
        )
        result = await self._read("list_daily_summary_serials", query)
        return list(result.scalars().all())

    async def get_live_readings(
        self,
        serial: str,
        start: datetime,
        end: datetime,
    ) -> List[LiveReading]:
        query = (
            select(LiveReadingModel)
            .where(
                and_(
                    LiveReadingModel.inverter_sn == serial,
                    LiveReadingModel.data_timestamp >= start,
                    LiveReadingModel.data_timestamp < end,
                )
            )
            .order_by(LiveReadingModel.data_timestamp)
        )
        result = await self._read("get_live_readings", query)
        return [self._model_to_reading(m) for m in result.scalars().all()]

    async def get_daily_summaries(
        self,
        serial: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[DailySummary]:
        conditions = [DailySummaryModel.inverter_sn == serial]
        if start_date:
            conditions.append(DailySummaryModel.summary_date >= start_date)
        if end_date:
            conditions.append(DailySummaryModel.summary_date <= end_date)

        query = (
            select(DailySummaryModel)
            .where(and_(*conditions))
            .order_by(DailySummaryModel.summary_date)
        )
        result = await self._read("get_daily_summaries", query)
        return [self._model_to_daily(m) for m in result.scalars().all()]

    async def get_monthly_summaries(
        self,
        serial: str,
        start_month: Optional[str] = None,
        end_month: Optional[str] = None,
    ) -> List[MonthlySummary]:
        conditions = [MonthlySummaryModel.inverter_sn == serial]
        if start_month:
            conditions.append(MonthlySummaryModel.summary_month >= start_month)
        if end_month:
            conditions.append(MonthlySummaryModel.summary_month <= end_month)

        query = (
            select(MonthlySummaryModel)
            .where(and_(*conditions))
            .order_by(MonthlySummaryModel.summary_month)
        )
        result = await self._read("get_monthly_summaries", query)
        return [self._model_to_monthly(m) for m in result.scalars().all()]

    # =========================================================================
    # Writes
    # =========================================================================

    async def upsert_daily_summaries(self, summaries: Sequence[DailySummary]) -> int:
        if not summaries:
            return 0

        now = datetime.now(timezone.utc)
        values = [
            {
                "inverter_sn": s.device_serial,
                "summary_date": s.summary_date,
                "total_generation_kwh": s.total_generation_kwh,
                "peak_power_kw": s.peak_power_kw,
                "created_at": s.created_at or now,
            }
            for s in summaries
        ]

        stmt = pg_insert(DailySummaryModel).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["inverter_sn", "summary_date"],
            set_={
                "total_generation_kwh": stmt.excluded.total_generation_kwh,
                "peak_power_kw": stmt.excluded.peak_power_kw,
            }
        )
        await self._write("upsert_daily_summaries", stmt)
        logger.debug(f"Upserted {len(values)} daily summaries")
        return len(values)

    async def upsert_monthly_summaries(self, summaries: Sequence[MonthlySummary]) -> int:
        if not summaries:
            return 0

        now = datetime.now(timezone.utc)
        values = [
            {
                "inverter_sn": s.device_serial,
                "summary_month": s.summary_month,
                "total_generation_kwh": s.total_generation_kwh,
                "peak_power_kw": s.peak_power_kw,
                "updated_at": s.updated_at or now,
            }
            for s in summaries
        ]

        stmt = pg_insert(MonthlySummaryModel).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["inverter_sn", "summary_month"],
            set_={
                "total_generation_kwh": stmt.excluded.total_generation_kwh,
                "peak_power_kw": stmt.excluded.peak_power_kw,
                "updated_at": stmt.excluded.updated_at,
            }
        )
        await self._write("upsert_monthly_summaries", stmt)
        logger.debug(f"Upserted {len(values)} monthly summaries")
        return len(values)

    async def prune_live_readings(self, older_than: datetime) -> int:
        stmt = delete(LiveReadingModel).where(LiveReadingModel.data_timestamp < older_than)
        result = await self._write("prune_live_readings", stmt)
        deleted = result.rowcount or 0
        logger.info(f"Deleted {deleted} live readings older than {older_than}")
        return deleted

    async def record_job_run(self, entry: JobRunLog) -> None:
        stmt = insert(ApiLogModel).values(
            endpoint=entry.endpoint,
            success=entry.success,
            message=entry.message,
            created_at=entry.created_at,
        )
        await self._write("record_job_run", stmt)

    async def _read(self, operation: str, query):
        try:
            return await self._session.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed: {e}")
            # Postgres aborts the transaction on error; later statements need a clean one
            await self._session.rollback()
            raise DatastoreException(operation, str(e))

    async def _write(self, operation: str, stmt):
        try:
            result = await self._session.execute(stmt)
            await self._session.commit()
            return result
        except SQLAlchemyError as e:
            logger.error(f"{operation} failed: {e}")
            await self._session.rollback()
            raise DatastoreException(operation, str(e))

    # =========================================================================
    # Mapping
    # =========================================================================

    def _model_to_reading(self, model: LiveReadingModel) -> LiveReading:
        return LiveReading(
            device_serial=model.inverter_sn,
            timestamp=model.data_timestamp,
            generation_today_kwh=model.generation_today,
            power_kw=model.power_ac,
        )

    def _model_to_daily(self, model: DailySummaryModel) -> DailySummary:
        return DailySummary(
            device_serial=model.inverter_sn,
            summary_date=model.summary_date,
            total_generation_kwh=float(model.total_generation_kwh or 0),
            peak_power_kw=float(model.peak_power_kw or 0),
            created_at=model.created_at,
        )

    def _model_to_monthly(self, model: MonthlySummaryModel) -> MonthlySummary:
        return MonthlySummary(
            device_serial=model.inverter_sn,
            summary_month=model.summary_month,
            total_generation_kwh=float(model.total_generation_kwh or 0),
            peak_power_kw=float(model.peak_power_kw or 0),
            updated_at=model.updated_at,
        )
