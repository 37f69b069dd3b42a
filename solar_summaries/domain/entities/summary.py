"""
Summary domain entities.

Live readings are raw per-inverter telemetry. Daily and monthly summaries are
the rolled-up rows the dashboard reads.
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


def round2(value: Optional[float]) -> float:
    """Round a measurement to two decimals, treating missing values as 0."""
    return round(float(value or 0), 2)


class SkipReason(str, Enum):
    """Why a daily bucket was not written."""
    NO_DATA = "no_data"
    IN_PROGRESS = "in_progress"
    EXISTING = "existing"


class JobEndpoint(str, Enum):
    """Endpoint names recorded in the job run log."""
    DAILY_SUCCESS = "generate_daily_summary_success"
    DAILY_FAILED = "generate_daily_summary_failed"
    DAILY_NO_DATA = "generate_daily_summary_no_data"
    MONTHLY_SUCCESS = "generate_monthly_summary_success"
    MONTHLY_FAILED = "generate_monthly_summary_failed"


@dataclass
class LiveReading:
    """
    A single inverter telemetry reading.

    Either measurement may be missing, in which case it is ignored by
    the reductions.
    """
    device_serial: str
    timestamp: datetime
    generation_today_kwh: Optional[float] = None
    power_kw: Optional[float] = None


@dataclass
class DailySummary:
    """Energy and peak power of one device for one local calendar day."""
    device_serial: str
    summary_date: date
    total_generation_kwh: float = 0.0
    peak_power_kw: float = 0.0
    created_at: Optional[datetime] = None

    def same_values(self, other: "DailySummary") -> bool:
        """Compare stored measurements, ignoring bookkeeping columns."""
        return (
            round2(self.total_generation_kwh) == round2(other.total_generation_kwh)
            and round2(self.peak_power_kw) == round2(other.peak_power_kw)
        )


@dataclass
class MonthlySummary:
    """Energy and peak power of one device for one calendar month (YYYY-MM)."""
    device_serial: str
    summary_month: str
    total_generation_kwh: float = 0.0
    peak_power_kw: float = 0.0
    updated_at: Optional[datetime] = None


@dataclass
class JobRunLog:
    """Outcome record written once per job run."""
    endpoint: str
    success: bool
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class DailyRunResult:
    """Counts reported by a daily summary run."""
    inserted: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: Dict[SkipReason, int] = field(
        default_factory=lambda: {reason: 0 for reason in SkipReason}
    )
    failed: int = 0
    failed_devices: List[str] = field(default_factory=list)
    devices: int = 0
    pruned: int = 0
    dry_run: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failed == 0 and not self.failed_devices and self.error is None

    @property
    def written(self) -> int:
        return self.inserted + self.updated

    def skip(self, reason: SkipReason) -> None:
        self.skipped[reason] += 1

    def mark_device_failed(self, serial: str) -> None:
        if serial not in self.failed_devices:
            self.failed_devices.append(serial)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'ok': self.ok,
            'totalInserted': self.inserted,
            'totalUpdated': self.updated,
            'unchanged': self.unchanged,
            'skipped': {reason.value: count for reason, count in self.skipped.items()},
            'failed': self.failed,
            'failedDevices': list(self.failed_devices),
            'devices': self.devices,
            'pruned': self.pruned,
            'dryRun': self.dry_run,
        }
        if self.error:
            data['error'] = self.error
        return data


@dataclass
class MonthlyRunResult:
    """Counts reported by a monthly summary run."""
    total_upserted: int = 0
    failed_devices: List[str] = field(default_factory=list)
    devices: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.failed_devices and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'ok': self.ok,
            'totalInserted': self.total_upserted,
        }
        if self.failed_devices:
            data['failedDevices'] = list(self.failed_devices)
        if self.error:
            data['error'] = self.error
        return data
