from typing import Sequence

from me_engine.schemas.reports import ProgressVariance, VarianceStatus
from me_engine.schemas.rollups import Rollup

ON_TRACK_TOLERANCE = 5.0


def classify(variance: float) -> VarianceStatus:
    if variance >= 0:
        return "ahead"
    if variance > -ON_TRACK_TOLERANCE:
        return "on-track"
    return "behind"


def analyze(rollups: Sequence[Rollup]) -> list[ProgressVariance]:
    return [
        ProgressVariance(
            period=f"{r.period} ({r.start_date.isoformat()} - {r.end_date.isoformat()})",
            planned_progress=r.avg_financial_progress,
            actual_progress=r.avg_physical_progress,
            variance=r.variance,
            status=classify(r.variance),
        )
        for r in rollups
    ]
