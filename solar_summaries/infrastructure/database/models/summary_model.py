"""
SQLAlchemy models for the telemetry and summary tables.

Table and column names match the hosted schema the dashboard reads.
"""
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Float,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..connection import Base


class LiveReadingModel(Base):
    """
    Raw inverter readings, appended by the ingestion job.

    Pruned after the retention window by the daily job.
    """
    __tablename__ = "inverter_data_live"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    inverter_sn: Mapped[str] = mapped_column(String(64), nullable=False)
    data_timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    generation_today: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    power_ac: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("idx_inverter_data_live_sn_time", "inverter_sn", "data_timestamp"),
    )


class DailySummaryModel(Base):
    """One row per inverter and local calendar day."""
    __tablename__ = "inverter_data_daily_summary"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    inverter_sn: Mapped[str] = mapped_column(String(64), nullable=False)
    summary_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_generation_kwh: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    peak_power_kw: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("inverter_sn", "summary_date", name="uq_inverter_data_daily_summary_sn_date"),
    )


class MonthlySummaryModel(Base):
    """One row per inverter and calendar month (YYYY-MM)."""
    __tablename__ = "inverter_data_monthly_summary"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    inverter_sn: Mapped[str] = mapped_column(String(64), nullable=False)
    summary_month: Mapped[str] = mapped_column(String(7), nullable=False)
    total_generation_kwh: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    peak_power_kw: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("inverter_sn", "summary_month", name="uq_inverter_data_monthly_summary_sn_month"),
    )


class ApiLogModel(Base):
    """Job run log."""
    __tablename__ = "api_logs"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    endpoint: Mapped[str] = mapped_column(String(100), nullable=False)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.utcnow)
