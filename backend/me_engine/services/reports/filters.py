import datetime as dt
from typing import Sequence

from me_engine.schemas.observations import DailyObservation
from me_engine.schemas.reports import AggregatedData, AggregatedSummary, MEFilter, SpecificPeriod
from me_engine.schemas.rollups import Rollup, RollupSnapshot
from me_engine.services.calendar import iso_week_of, quarter_of
from me_engine.services.rollups.kpis import mean

_UNIT_LABELS = {"daily": "days", "weekly": "weeks", "monthly": "months", "quarterly": "quarters"}


def _day_matches(d: dt.date, sp: SpecificPeriod | None) -> bool:
    if sp is None:
        return True
    if d.year != sp.year:
        return False
    if sp.quarter is not None and quarter_of(d.month) != sp.quarter:
        return False
    if sp.month is not None and d.month != sp.month:
        return False
    if sp.week is not None and iso_week_of(d)[1] != sp.week:
        return False
    return True


def _rollup_matches(r: Rollup, sp: SpecificPeriod | None) -> bool:
    if sp is None:
        return True
    if r.year != sp.year:
        return False
    if r.period == "weekly":
        return sp.week is None or r.week_number == sp.week
    if r.period == "monthly":
        if sp.month is not None and r.month != sp.month:
            return False
        return sp.quarter is None or quarter_of(r.month) == sp.quarter
    if r.period == "quarterly":
        return sp.quarter is None or r.quarter == sp.quarter
    raise ValueError(f"unknown rollup period: {r.period}")


def _summary(period: str, physical: list[float], financial: list[float], accomplishments: int, issues: int) -> AggregatedSummary:
    avg_physical = mean(physical)
    avg_financial = mean(financial)
    return AggregatedSummary(
        total_entries=len(physical),
        avg_physical_progress=avg_physical,
        avg_financial_progress=avg_financial,
        total_accomplishments=accomplishments,
        total_issues=issues,
        overall_variance=avg_physical - avg_financial,
        period_label=f"{len(physical)} {_UNIT_LABELS[period]} of data",
    )


def filter_daily(observations: Sequence[DailyObservation], flt: MEFilter) -> AggregatedData:
    start, end = flt.date_range.start_date, flt.date_range.end_date
    rows = []
    for o in observations:
        d = o.day
        if d is not None and start <= d <= end and _day_matches(d, flt.specific_period):
            rows.append(o)
    summary = _summary(
        "daily",
        [o.physical_progress for o in rows],
        [o.financial_progress for o in rows],
        sum(len(o.accomplishments) for o in rows),
        sum(len(o.issues) for o in rows),
    )
    return AggregatedData(period="daily", data=rows, summary=summary)


def filter_rollups(rollups: Sequence[Rollup], flt: MEFilter) -> AggregatedData:
    start, end = flt.date_range.start_date, flt.date_range.end_date
    # full containment, partial overlap does not count
    rows = [
        r for r in rollups
        if r.start_date >= start and r.end_date <= end and _rollup_matches(r, flt.specific_period)
    ]
    summary = _summary(
        flt.period,
        [r.avg_physical_progress for r in rows],
        [r.avg_financial_progress for r in rows],
        sum(r.total_accomplishments for r in rows),
        sum(r.total_issues for r in rows),
    )
    return AggregatedData(period=flt.period, data=rows, summary=summary)


def apply_filter(
    flt: MEFilter | None, observations: Sequence[DailyObservation], snapshot: RollupSnapshot
) -> AggregatedData | None:
    if flt is None:
        return None
    if flt.period == "daily":
        return filter_daily(observations, flt)
    if flt.period == "weekly":
        return filter_rollups(snapshot.weekly, flt)
    if flt.period == "monthly":
        return filter_rollups(snapshot.monthly, flt)
    if flt.period == "quarterly":
        return filter_rollups(snapshot.quarterly, flt)
    raise ValueError(f"unknown filter period: {flt.period}")
