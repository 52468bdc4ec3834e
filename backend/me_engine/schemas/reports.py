import datetime as dt
from typing import Literal

from pydantic import Field

from me_engine.schemas._base import CamelModel
from me_engine.schemas.observations import DailyObservation
from me_engine.schemas.rollups import WeeklyRollup, MonthlyRollup, QuarterlyRollup

MEFilterPeriod = Literal["daily", "weekly", "monthly", "quarterly"]
RollupPeriod = Literal["weekly", "monthly", "quarterly"]
VarianceStatus = Literal["ahead", "on-track", "behind"]
TrendDirection = Literal["up", "down", "stable"]

class DateRange(CamelModel):
    start_date: dt.date
    end_date: dt.date

class SpecificPeriod(CamelModel):
    year: int
    quarter: int | None = Field(default=None, ge=1, le=4)
    month: int | None = Field(default=None, ge=1, le=12)
    week: int | None = Field(default=None, ge=1, le=53)

class MEFilter(CamelModel):
    period: MEFilterPeriod
    date_range: DateRange
    specific_period: SpecificPeriod | None = None

class AggregatedSummary(CamelModel):
    total_entries: int
    avg_physical_progress: float
    avg_financial_progress: float
    total_accomplishments: int
    total_issues: int
    overall_variance: float
    period_label: str

class AggregatedData(CamelModel):
    period: MEFilterPeriod
    data: list[DailyObservation] | list[WeeklyRollup] | list[MonthlyRollup] | list[QuarterlyRollup]
    summary: AggregatedSummary

class ProgressVariance(CamelModel):
    period: str
    planned_progress: float
    actual_progress: float
    variance: float
    status: VarianceStatus

class MEMetrics(CamelModel):
    total_logs: int
    avg_daily_progress: float
    current_variance: float
    last_updated: dt.datetime | None = None
    trend_direction: TrendDirection
