import datetime as dt
from typing import Iterable, Sequence

import pydantic

from me_engine.core.logging import logger
from me_engine.core.providers import Clock, IdFactory, QualitySignal, new_id, utcnow
from me_engine.schemas.observations import DailyObservation, ObservationDraft, ObservationPatch
from me_engine.schemas.reports import AggregatedData, MEFilter, MEMetrics, ProgressVariance, RollupPeriod
from me_engine.schemas.rollups import Rollup, RollupSnapshot
from me_engine.services.calendar import WeekRangeMode
from me_engine.services.reports import filters, metrics, variance
from me_engine.services.repository import LogRepository
from me_engine.services.rollups.calculator import RollupCalculator
from me_engine.services.validators import NotFoundError, Result, ValidationError, from_pydantic


class MEEngine:
    """M&E engine for one project.

    Owns the observation repository and the last published rollup snapshot.
    Mutations are expected to arrive one at a time; each one reruns the whole
    weekly -> monthly -> quarterly pipeline and swaps the snapshot in a single
    assignment, so readers only ever see a complete snapshot.
    """

    def __init__(
        self,
        project_id: str,
        total_budget: float | None = None,
        quality: QualitySignal | None = None,
        week_range_mode: WeekRangeMode | None = None,
        clock: Clock = utcnow,
        id_factory: IdFactory = new_id,
    ):
        self.project_id = project_id
        self.repository = LogRepository(project_id, clock=clock, id_factory=id_factory)
        self.calculator = RollupCalculator(
            project_id,
            quality=quality,
            total_budget=total_budget,
            week_range_mode=week_range_mode,
            clock=clock,
        )
        self._snapshot = RollupSnapshot(project_id=project_id)
        self._observations: tuple[DailyObservation, ...] = ()
        self.repository.subscribe(self.recompute)

    @property
    def snapshot(self) -> RollupSnapshot:
        return self._snapshot

    def recompute(self) -> RollupSnapshot:
        observations = tuple(self.repository.list())
        snapshot = self.calculator.run(observations)
        self._observations, self._snapshot = observations, snapshot
        logger.info(
            "rollups_recomputed",
            project_id=self.project_id,
            observations=len(observations),
            weekly=len(snapshot.weekly),
            monthly=len(snapshot.monthly),
            quarterly=len(snapshot.quarterly),
            warnings=len(snapshot.warnings),
        )
        return snapshot

    # mutations

    def add_observation(self, draft: ObservationDraft | dict) -> Result[DailyObservation]:
        return self.repository.add(draft)

    def add_observations(
        self, drafts: Iterable[ObservationDraft | dict], row_nums: Sequence[int] | None = None
    ) -> tuple[list[DailyObservation], list[ValidationError]]:
        return self.repository.add_many(drafts, row_nums=row_nums)

    def update_observation(self, observation_id: str, partial: ObservationPatch | dict) -> Result[None]:
        return self.repository.update(observation_id, partial)

    def remove_observation(self, observation_id: str) -> Result[None]:
        return self.repository.remove(observation_id)

    def load_observations(self, records: Iterable[DailyObservation | dict]) -> list[ValidationError]:
        return self.repository.load(records)

    # reads

    def list_observations(self) -> list[DailyObservation]:
        return list(self._observations)

    def list_rollups(self, period: RollupPeriod) -> list[Rollup]:
        snapshot = self._snapshot
        if period == "weekly":
            return list(snapshot.weekly)
        if period == "monthly":
            return list(snapshot.monthly)
        if period == "quarterly":
            return list(snapshot.quarterly)
        raise ValueError(f"unknown rollup period: {period}")

    def all_rollups(self) -> list[Rollup]:
        snapshot = self._snapshot
        return [*snapshot.weekly, *snapshot.monthly, *snapshot.quarterly]

    def find_rollup(self, period: RollupPeriod, start: dt.date, end: dt.date) -> Result[Rollup]:
        for r in self.list_rollups(period):
            if r.start_date <= start and r.end_date >= end:
                return Result.success(r)
        return Result.failure(NotFoundError(f"No {period} rollup found for the specified period"))

    def apply_filter(self, flt: MEFilter | dict | None) -> AggregatedData | None:
        if isinstance(flt, dict):
            try:
                flt = MEFilter.model_validate(flt)
            except pydantic.ValidationError as e:
                logger.info("filter_rejected", project_id=self.project_id, error=from_pydantic(e).message)
                return None
        return filters.apply_filter(flt, self._observations, self._snapshot)

    def get_variance(self, period: RollupPeriod | None = None) -> list[ProgressVariance]:
        rollups = self.all_rollups() if period is None else self.list_rollups(period)
        return variance.analyze(rollups)

    def get_metrics(self) -> MEMetrics:
        # undated records only show up as rollup warnings
        return metrics.summarize([o for o in self._observations if o.day is not None])
