"""Daily -> weekly -> monthly -> quarterly rollups.

Each stage reads only the layer directly below it. Monthly and quarterly
figures are means of the lower-level means, not re-weighted by day counts.
"""
import datetime as dt
from collections import defaultdict
from typing import Sequence

from me_engine.core.config import settings
from me_engine.core.logging import logger
from me_engine.core.providers import Clock, ConstantQualitySignal, QualitySignal, bounded_missed, bounded_quality, utcnow
from me_engine.schemas.observations import WEATHER_VALUES, DailyObservation
from me_engine.schemas.rollups import (
    MonthlyRollup,
    QuarterlyRollup,
    RollupSnapshot,
    WeatherSummary,
    WeeklyRollup,
)
from me_engine.services.calendar import WeekRangeMode, iso_week_of, month_bounds, month_days, quarter_bounds, quarter_of, week_bounds
from me_engine.services.rollups.kpis import (
    budget_analysis,
    mean,
    milestone_estimate,
    monthly_kpis,
    quarterly_kpis,
    risk_assessment,
    weekly_kpis,
)
from me_engine.services.validators import RollupWarning


def _sum_weather(rollups) -> WeatherSummary:
    return WeatherSummary(**{w: sum(getattr(r.weather_summary, w) for r in rollups) for w in WEATHER_VALUES})


class RollupCalculator:
    def __init__(
        self,
        project_id: str,
        quality: QualitySignal | None = None,
        total_budget: float | None = None,
        week_range_mode: WeekRangeMode | None = None,
        clock: Clock = utcnow,
    ):
        self.project_id = project_id
        self.quality = quality or ConstantQualitySignal()
        self.total_budget = settings.PROJECT_TOTAL_BUDGET if total_budget is None else total_budget
        self.week_range_mode = week_range_mode or settings.WEEK_RANGE_MODE
        self.clock = clock

    def weekly(
        self, observations: Sequence[DailyObservation], generated_at: dt.datetime | None = None
    ) -> tuple[list[WeeklyRollup], list[RollupWarning]]:
        generated_at = generated_at or self.clock()
        groups: dict[tuple[int, int], list[DailyObservation]] = defaultdict(list)
        warnings: list[RollupWarning] = []
        for obs in observations:
            d = obs.day
            if d is None:
                warnings.append(RollupWarning(obs.id, str(obs.date), "unparseable date, excluded from rollups"))
                continue
            groups[iso_week_of(d)].append(obs)

        out = []
        for (year, week), logs in sorted(groups.items()):
            start, end = week_bounds(year, week, self.week_range_mode)
            avg_physical = mean(o.physical_progress for o in logs)
            avg_financial = mean(o.financial_progress for o in logs)
            avg_labor = mean(o.labor_count for o in logs)
            weather = {w: 0 for w in WEATHER_VALUES}
            for o in logs:
                weather[o.weather] += 1
            rollup_id = f"weekly-{year}-W{week:02d}"
            out.append(
                WeeklyRollup(
                    id=rollup_id,
                    project_id=self.project_id,
                    week_number=week,
                    year=year,
                    start_date=start,
                    end_date=end,
                    avg_physical_progress=avg_physical,
                    avg_financial_progress=avg_financial,
                    total_accomplishments=sum(len(o.accomplishments) for o in logs),
                    total_issues=sum(len(o.issues) for o in logs),
                    avg_labor_count=avg_labor,
                    operational_days=len(logs),
                    weather_summary=WeatherSummary(**weather),
                    variance=avg_physical - avg_financial,
                    kpis=weekly_kpis(avg_physical, avg_financial, avg_labor, bounded_quality(self.quality, rollup_id)),
                    daily_log_ids=tuple(o.id for o in logs),
                    generated_at=generated_at,
                )
            )
        return out, warnings

    def monthly(self, weeks: Sequence[WeeklyRollup], generated_at: dt.datetime | None = None) -> list[MonthlyRollup]:
        generated_at = generated_at or self.clock()
        groups: dict[tuple[int, int], list[WeeklyRollup]] = defaultdict(list)
        for w in weeks:
            # a week belongs to the month holding its start date
            groups[(w.start_date.year, w.start_date.month)].append(w)

        out = []
        for (year, month), group in sorted(groups.items()):
            start, end = month_bounds(year, month)
            avg_physical = mean(w.avg_physical_progress for w in group)
            avg_financial = mean(w.avg_financial_progress for w in group)
            operational_days = sum(w.operational_days for w in group)
            rollup_id = f"monthly-{year}-{month:02d}"
            out.append(
                MonthlyRollup(
                    id=rollup_id,
                    project_id=self.project_id,
                    month=month,
                    year=year,
                    start_date=start,
                    end_date=end,
                    avg_physical_progress=avg_physical,
                    avg_financial_progress=avg_financial,
                    total_accomplishments=sum(w.total_accomplishments for w in group),
                    total_issues=sum(w.total_issues for w in group),
                    avg_labor_count=mean(w.avg_labor_count for w in group),
                    operational_days=operational_days,
                    weather_summary=_sum_weather(group),
                    variance=avg_physical - avg_financial,
                    kpis=monthly_kpis(group, operational_days, month_days(year, month)),
                    weekly_rollup_ids=tuple(w.id for w in group),
                    milestones=milestone_estimate(avg_physical, bounded_missed(self.quality, rollup_id)),
                    generated_at=generated_at,
                )
            )
        return out

    def quarterly(self, months: Sequence[MonthlyRollup], generated_at: dt.datetime | None = None) -> list[QuarterlyRollup]:
        generated_at = generated_at or self.clock()
        groups: dict[tuple[int, int], list[MonthlyRollup]] = defaultdict(list)
        for m in months:
            groups[(m.year, quarter_of(m.month))].append(m)

        out = []
        for (year, quarter), group in sorted(groups.items()):
            start, end = quarter_bounds(year, quarter)
            avg_physical = mean(m.avg_physical_progress for m in group)
            avg_financial = mean(m.avg_financial_progress for m in group)
            operational_days = sum(m.operational_days for m in group)
            total_issues = sum(m.total_issues for m in group)
            out.append(
                QuarterlyRollup(
                    id=f"quarterly-{year}-Q{quarter}",
                    project_id=self.project_id,
                    quarter=quarter,
                    year=year,
                    start_date=start,
                    end_date=end,
                    avg_physical_progress=avg_physical,
                    avg_financial_progress=avg_financial,
                    total_accomplishments=sum(m.total_accomplishments for m in group),
                    total_issues=total_issues,
                    avg_labor_count=mean(m.avg_labor_count for m in group),
                    operational_days=operational_days,
                    weather_summary=_sum_weather(group),
                    variance=avg_physical - avg_financial,
                    kpis=quarterly_kpis(group, avg_physical, avg_financial),
                    monthly_rollup_ids=tuple(m.id for m in group),
                    milestones={
                        "achieved": sum(m.milestones.achieved for m in group),
                        "missed": sum(m.milestones.missed for m in group),
                        "upcoming": sum(m.milestones.upcoming for m in group),
                    },
                    budget_analysis=budget_analysis(self.total_budget, avg_financial, operational_days),
                    risk_assessment=risk_assessment(total_issues),
                    generated_at=generated_at,
                )
            )
        return out

    def run(self, observations: Sequence[DailyObservation]) -> RollupSnapshot:
        generated_at = self.clock()
        weekly, warnings = self.weekly(observations, generated_at)
        monthly = self.monthly(weekly, generated_at)
        quarterly = self.quarterly(monthly, generated_at)
        for w in warnings:
            logger.warning("rollup_record_skipped", project_id=self.project_id, observation_id=w.observation_id, date=w.date)
        return RollupSnapshot(
            project_id=self.project_id,
            weekly=tuple(weekly),
            monthly=tuple(monthly),
            quarterly=tuple(quarterly),
            warnings=tuple(warnings),
            generated_at=generated_at,
        )
