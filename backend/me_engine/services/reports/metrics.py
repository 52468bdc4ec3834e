from typing import Sequence

from me_engine.schemas.observations import DailyObservation
from me_engine.schemas.reports import MEMetrics, TrendDirection
from me_engine.services.rollups.kpis import mean


def _trend(latest: DailyObservation | None, previous: DailyObservation | None) -> TrendDirection:
    if latest is None or previous is None:
        return "stable"
    if latest.physical_progress > previous.physical_progress:
        return "up"
    if latest.physical_progress < previous.physical_progress:
        return "down"
    return "stable"


def summarize(observations: Sequence[DailyObservation]) -> MEMetrics:
    """Top-level snapshot. Expects observations in chronological order."""
    latest = observations[-1] if observations else None
    previous = observations[-2] if len(observations) > 1 else None
    return MEMetrics(
        total_logs=len(observations),
        avg_daily_progress=mean(o.physical_progress for o in observations),
        current_variance=latest.physical_progress - latest.financial_progress if latest else 0.0,
        last_updated=latest.updated_at if latest else None,
        trend_direction=_trend(latest, previous),
    )
