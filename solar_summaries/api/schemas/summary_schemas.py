"""
Pydantic schemas for summary and job endpoints.
"""
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ...domain.entities.summary import DailySummary, MonthlySummary


class DailySummaryResponse(BaseModel):
    """One device-day."""
    inverter_sn: str
    summary_date: date
    total_generation_kwh: float
    peak_power_kw: float

    @classmethod
    def from_entity(cls, summary: DailySummary) -> "DailySummaryResponse":
        return cls(
            inverter_sn=summary.device_serial,
            summary_date=summary.summary_date,
            total_generation_kwh=summary.total_generation_kwh,
            peak_power_kw=summary.peak_power_kw,
        )


class MonthlySummaryResponse(BaseModel):
    """One device-month."""
    inverter_sn: str
    summary_month: str
    total_generation_kwh: float
    peak_power_kw: float

    @classmethod
    def from_entity(cls, summary: MonthlySummary) -> "MonthlySummaryResponse":
        return cls(
            inverter_sn=summary.device_serial,
            summary_month=summary.summary_month,
            total_generation_kwh=summary.total_generation_kwh,
            peak_power_kw=summary.peak_power_kw,
        )


class DailySummaryListResponse(BaseModel):
    inverter_sn: str
    summaries: List[DailySummaryResponse]
    count: int


class MonthlySummaryListResponse(BaseModel):
    inverter_sn: str
    summaries: List[MonthlySummaryResponse]
    count: int


class DailyJobRequest(BaseModel):
    """Options for a hosted daily summary run."""
    days_back: Optional[int] = Field(None, ge=1, le=366)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    serials: Optional[List[str]] = None
    only_missing: bool = False
    dry_run: bool = False


class JobRunResponse(BaseModel):
    """Job outcome in the dashboard's wire format."""
    ok: bool
    totalInserted: int
    totalUpdated: Optional[int] = None
    unchanged: Optional[int] = None
    skipped: Optional[Dict[str, int]] = None
    failed: Optional[int] = None
    failedDevices: Optional[List[str]] = None
    error: Optional[str] = None
