import datetime as dt
from typing import Literal

from pydantic import ConfigDict, Field

from me_engine.schemas._base import CamelModel
from me_engine.services.validators import RollupWarning


class _Frozen(CamelModel):
    model_config = ConfigDict(frozen=True)


class WeatherSummary(_Frozen):
    sunny: int = 0
    cloudy: int = 0
    rainy: int = 0
    stormy: int = 0


class WeeklyKPIs(_Frozen):
    on_time_performance: float
    budget_efficiency: float
    quality_score: float
    productivity_index: float


class MonthlyKPIs(WeeklyKPIs):
    resource_utilization: float


class QuarterlyKPIs(MonthlyKPIs):
    overall_project_health: float


class Milestones(_Frozen):
    achieved: int
    missed: int
    upcoming: int


class BudgetAnalysis(_Frozen):
    allocated_budget: float
    utilized_budget: float
    remaining_budget: float
    burn_rate: float


class RiskAssessment(_Frozen):
    low_risk: float
    medium_risk: float
    high_risk: float
    critical_risk: float


class _RollupBase(_Frozen):
    id: str
    project_id: str
    year: int
    start_date: dt.date
    end_date: dt.date
    avg_physical_progress: float
    avg_financial_progress: float
    total_accomplishments: int
    total_issues: int
    avg_labor_count: float
    operational_days: int
    weather_summary: WeatherSummary
    variance: float
    generated_at: dt.datetime


class WeeklyRollup(_RollupBase):
    period: Literal["weekly"] = "weekly"
    week_number: int
    kpis: WeeklyKPIs
    daily_log_ids: tuple[str, ...]


class MonthlyRollup(_RollupBase):
    period: Literal["monthly"] = "monthly"
    month: int
    kpis: MonthlyKPIs
    weekly_rollup_ids: tuple[str, ...]
    milestones: Milestones


class QuarterlyRollup(_RollupBase):
    period: Literal["quarterly"] = "quarterly"
    quarter: int
    kpis: QuarterlyKPIs
    monthly_rollup_ids: tuple[str, ...]
    milestones: Milestones
    budget_analysis: BudgetAnalysis
    risk_assessment: RiskAssessment


Rollup = WeeklyRollup | MonthlyRollup | QuarterlyRollup


class RollupSnapshot(_Frozen):
    project_id: str
    weekly: tuple[WeeklyRollup, ...] = ()
    monthly: tuple[MonthlyRollup, ...] = ()
    quarterly: tuple[QuarterlyRollup, ...] = ()
    warnings: tuple[RollupWarning, ...] = Field(default=())
    generated_at: dt.datetime | None = None
