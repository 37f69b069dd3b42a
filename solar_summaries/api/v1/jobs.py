"""
Hosted job endpoints.

Same runs as the CLI, for schedulers that can only issue HTTP requests.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..dependencies import (
    get_daily_summary_service,
    get_monthly_summary_service,
    require_jobs_token,
)
from ..schemas.summary_schemas import DailyJobRequest, JobRunResponse
from ...application.services.daily_summary_service import DailySummaryService
from ...application.services.monthly_summary_service import MonthlySummaryService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/jobs",
    tags=["Jobs"],
    dependencies=[Depends(require_jobs_token)],
)


def _job_response(payload: dict, ok: bool) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_200_OK if ok else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=payload,
    )


@router.post("/daily-summaries", response_model=JobRunResponse)
async def run_daily_summaries(
    request: Optional[DailyJobRequest] = None,
    service: DailySummaryService = Depends(get_daily_summary_service),
):
    """
    Run the daily summary job.

    Without a body this is the scheduled run (yesterday and today, then
    prune). With a body it backfills a trailing window or a date range.
    """
    if request is None:
        result = await service.run_scheduled()
    elif request.start_date or request.end_date:
        result = await service.run_range(
            start_date=request.start_date,
            end_date=request.end_date,
            serials=request.serials,
            only_missing=request.only_missing,
            dry_run=request.dry_run,
        )
    else:
        result = await service.run_backfill(
            days_back=request.days_back,
            serials=request.serials,
            only_missing=request.only_missing,
            dry_run=request.dry_run,
        )
    logger.info(f"Daily summary job finished: ok={result.ok}")
    return _job_response(result.to_dict(), result.ok)


@router.post("/monthly-summaries", response_model=JobRunResponse)
async def run_monthly_summaries(
    service: MonthlySummaryService = Depends(get_monthly_summary_service),
):
    """Rebuild monthly summaries from daily summaries."""
    result = await service.run()
    logger.info(f"Monthly summary job finished: ok={result.ok}")
    return _job_response(result.to_dict(), result.ok)
