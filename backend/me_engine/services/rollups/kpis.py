import math
from typing import Iterable, Sequence

from me_engine.schemas.rollups import (
    BudgetAnalysis,
    Milestones,
    MonthlyKPIs,
    MonthlyRollup,
    QuarterlyKPIs,
    RiskAssessment,
    WeeklyKPIs,
    WeeklyRollup,
)


def mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / max(len(values), 1)


def weekly_kpis(avg_physical: float, avg_financial: float, avg_labor: float, quality_score: float) -> WeeklyKPIs:
    return WeeklyKPIs(
        on_time_performance=min(100.0, avg_physical + 10),
        budget_efficiency=min(100.0, avg_financial + 15),
        quality_score=quality_score,
        productivity_index=(avg_physical / avg_labor) * 10 if avg_labor > 0 else 0.0,
    )


def monthly_kpis(weeks: Sequence[WeeklyRollup], operational_days: int, days_in_month: int) -> MonthlyKPIs:
    return MonthlyKPIs(
        on_time_performance=mean(w.kpis.on_time_performance for w in weeks),
        budget_efficiency=mean(w.kpis.budget_efficiency for w in weeks),
        quality_score=mean(w.kpis.quality_score for w in weeks),
        productivity_index=mean(w.kpis.productivity_index for w in weeks),
        resource_utilization=min(100.0, operational_days / days_in_month * 100) if days_in_month else 0.0,
    )


def quarterly_kpis(months: Sequence[MonthlyRollup], avg_physical: float, avg_financial: float) -> QuarterlyKPIs:
    return QuarterlyKPIs(
        on_time_performance=mean(m.kpis.on_time_performance for m in months),
        budget_efficiency=mean(m.kpis.budget_efficiency for m in months),
        quality_score=mean(m.kpis.quality_score for m in months),
        productivity_index=mean(m.kpis.productivity_index for m in months),
        resource_utilization=mean(m.kpis.resource_utilization for m in months),
        overall_project_health=min(100.0, (avg_physical + avg_financial) / 2),
    )


def milestone_estimate(avg_physical: float, missed: int) -> Milestones:
    # heuristic: one milestone per 25 points of physical progress
    return Milestones(
        achieved=math.floor(avg_physical / 25),
        missed=missed,
        upcoming=max(0, math.floor((100 - avg_physical) / 25)),
    )


def budget_analysis(total_budget: float, avg_financial: float, operational_days: int) -> BudgetAnalysis:
    utilization_rate = avg_financial / 100
    utilized = total_budget * utilization_rate
    return BudgetAnalysis(
        allocated_budget=total_budget,
        utilized_budget=utilized,
        remaining_budget=total_budget * (1 - utilization_rate),
        burn_rate=utilized / operational_days if operational_days > 0 else 0.0,
    )


def risk_assessment(total_issues: int) -> RiskAssessment:
    # independent buckets, not a distribution
    return RiskAssessment(
        low_risk=max(0, 100 - total_issues * 10),
        medium_risk=min(50, total_issues * 5),
        high_risk=min(30, total_issues * 3),
        critical_risk=min(20, max(0, total_issues - 5)),
    )
