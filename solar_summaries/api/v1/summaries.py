"""
Summary read endpoints used by the dashboard panels.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_summary_store
from ..schemas.summary_schemas import (
    DailySummaryListResponse,
    DailySummaryResponse,
    MonthlySummaryListResponse,
    MonthlySummaryResponse,
)
from ...application.interfaces.repositories import SummaryStore
from ...domain.exceptions import ValidationException

router = APIRouter(prefix="/summaries", tags=["Summaries"])

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


@router.get("/{serial}/daily", response_model=DailySummaryListResponse)
async def get_daily_summaries(
    serial: str,
    start: Optional[date] = Query(None, description="Inclusive start date"),
    end: Optional[date] = Query(None, description="Inclusive end date"),
    store: SummaryStore = Depends(get_summary_store),
):
    """Daily summaries of one inverter, oldest first."""
    if start and end and end < start:
        raise ValidationException(
            "end must not precede start",
            errors={'end': ['before start']},
        )
    summaries = await store.get_daily_summaries(serial, start, end)
    return DailySummaryListResponse(
        inverter_sn=serial,
        summaries=[DailySummaryResponse.from_entity(s) for s in summaries],
        count=len(summaries),
    )


@router.get("/{serial}/monthly", response_model=MonthlySummaryListResponse)
async def get_monthly_summaries(
    serial: str,
    start: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="Inclusive start month (YYYY-MM)"),
    end: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="Inclusive end month (YYYY-MM)"),
    store: SummaryStore = Depends(get_summary_store),
):
    """Monthly summaries of one inverter, oldest first."""
    if start and end and end < start:
        raise ValidationException(
            "end must not precede start",
            errors={'end': ['before start']},
        )
    summaries = await store.get_monthly_summaries(serial, start, end)
    return MonthlySummaryListResponse(
        inverter_sn=serial,
        summaries=[MonthlySummaryResponse.from_entity(s) for s in summaries],
        count=len(summaries),
    )
