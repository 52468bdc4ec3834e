"""Collaborators the engine needs but does not own: a time source, an id
generator and the quality-inspection signal."""
import datetime as dt
import uuid
from typing import Callable, Protocol

from me_engine.core.config import settings

Clock = Callable[[], dt.datetime]
IdFactory = Callable[[], str]

QUALITY_SCORE_MIN = 85.0
QUALITY_SCORE_MAX = 100.0


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex[:12]


class QualitySignal(Protocol):
    def quality_score(self, period_id: str) -> float: ...

    def missed_milestones(self, period_id: str) -> int: ...


class ConstantQualitySignal:
    """Stands in for a quality-inspection feed until one exists."""

    def __init__(self, score: float | None = None, missed: int | None = None):
        self.score = settings.QUALITY_SCORE_DEFAULT if score is None else score
        self.missed = settings.MISSED_MILESTONES_DEFAULT if missed is None else missed

    def quality_score(self, period_id: str) -> float:
        return self.score

    def missed_milestones(self, period_id: str) -> int:
        return self.missed


def bounded_quality(signal: QualitySignal, period_id: str) -> float:
    score = float(signal.quality_score(period_id))
    return min(QUALITY_SCORE_MAX, max(QUALITY_SCORE_MIN, score))


def bounded_missed(signal: QualitySignal, period_id: str) -> int:
    return min(1, max(0, int(signal.missed_milestones(period_id))))
