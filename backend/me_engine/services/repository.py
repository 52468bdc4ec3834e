import datetime as dt
from typing import Any, Callable, Iterable, Sequence

import pydantic

from me_engine.core.logging import logger
from me_engine.core.providers import Clock, IdFactory, new_id, utcnow
from me_engine.schemas.observations import DailyObservation, ObservationDraft, ObservationPatch
from me_engine.services.validators import NotFoundError, Result, ValidationError, from_pydantic

PERCENT_FIELDS = ("physical_progress", "financial_progress")


def _clamp_percentages(values: dict[str, Any], observation_id: str | None = None) -> dict[str, Any]:
    for name in PERCENT_FIELDS:
        v = values.get(name)
        if v is None:
            continue
        clamped = min(100.0, max(0.0, float(v)))
        if clamped != v:
            logger.warning("percentage_clamped", field=name, value=v, clamped=clamped, observation_id=observation_id)
        values[name] = clamped
    return values


def _sort_key(obs: DailyObservation) -> tuple[dt.date, int]:
    # records with an unparseable date go last
    d = obs.day
    return (d, 0) if d is not None else (dt.date.max, 1)


class LogRepository:
    """Single owner of one project's daily observations.

    Every successful mutation notifies the subscribers, which recompute the
    rollups from the full set.
    """

    def __init__(self, project_id: str, clock: Clock = utcnow, id_factory: IdFactory = new_id):
        self.project_id = project_id
        self._clock = clock
        self._id_factory = id_factory
        self._items: dict[str, DailyObservation] = {}
        self._subscribers: list[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._subscribers.append(callback)

    def _mark_dirty(self) -> None:
        for callback in self._subscribers:
            callback()

    def _build(self, draft: ObservationDraft | dict) -> DailyObservation:
        if isinstance(draft, ObservationDraft):
            draft = draft.model_dump()
        else:
            draft = ObservationDraft.model_validate(draft).model_dump()
        values = _clamp_percentages(draft)
        now = self._clock()
        return DailyObservation(id=self._id_factory(), created_at=now, updated_at=now, **values)

    def _check_project(self, obs: DailyObservation) -> ValidationError | None:
        if obs.project_id != self.project_id:
            return ValidationError(
                f"observation belongs to project {obs.project_id}, not {self.project_id}",
                field="projectId",
            )
        return None

    def add(self, draft: ObservationDraft | dict) -> Result[DailyObservation]:
        try:
            obs = self._build(draft)
        except pydantic.ValidationError as e:
            err = from_pydantic(e)
            logger.info("observation_rejected", project_id=self.project_id, error=err.message)
            return Result.failure(err)
        err = self._check_project(obs)
        if err:
            return Result.failure(err)
        self._items[obs.id] = obs
        logger.info("observation_added", project_id=self.project_id, observation_id=obs.id, date=obs.date)
        self._mark_dirty()
        return Result.success(obs)

    def add_many(
        self, drafts: Iterable[ObservationDraft | dict], row_nums: Sequence[int] | None = None
    ) -> tuple[list[DailyObservation], list[ValidationError]]:
        """Adds a batch as one mutation.

        Errors carry `row_nums[i]` when given, otherwise the 1-based position in the batch.
        """
        added: list[DailyObservation] = []
        errors: list[ValidationError] = []
        for i, draft in enumerate(drafts):
            row_num = row_nums[i] if row_nums is not None else i + 1
            try:
                obs = self._build(draft)
            except pydantic.ValidationError as e:
                err = from_pydantic(e)
                err.row_num = row_num
                errors.append(err)
                continue
            err = self._check_project(obs)
            if err:
                err.row_num = row_num
                errors.append(err)
                continue
            added.append(obs)
        for obs in added:
            self._items[obs.id] = obs
        logger.info("observations_added", project_id=self.project_id, added=len(added), errors=len(errors))
        if added:
            self._mark_dirty()
        return added, errors

    def load(self, records: Iterable[DailyObservation | dict]) -> list[ValidationError]:
        """Replace the collection with caller-supplied records.

        Dates are not checked here; bad ones surface as rollup warnings.
        Any malformed record rejects the whole load and the collection stays as it was.
        """
        items: dict[str, DailyObservation] = {}
        errors: list[ValidationError] = []
        for i, r in enumerate(records, start=1):
            try:
                obs = r if isinstance(r, DailyObservation) else DailyObservation.model_validate(r)
            except pydantic.ValidationError as e:
                err = from_pydantic(e)
                err.row_num = i
                errors.append(err)
                continue
            items[obs.id] = obs
        if errors:
            logger.info("observations_load_rejected", project_id=self.project_id, errors=len(errors))
            return errors
        self._items = items
        logger.info("observations_loaded", project_id=self.project_id, count=len(items))
        self._mark_dirty()
        return errors

    def get(self, observation_id: str) -> DailyObservation | None:
        return self._items.get(observation_id)

    def update(self, observation_id: str, partial: ObservationPatch | dict) -> Result[None]:
        current = self._items.get(observation_id)
        if current is None:
            logger.info("observation_not_found", project_id=self.project_id, observation_id=observation_id)
            return Result.failure(NotFoundError(f"Observation {observation_id} not found", observation_id=observation_id))
        try:
            patch = partial if isinstance(partial, ObservationPatch) else ObservationPatch.model_validate(partial)
        except pydantic.ValidationError as e:
            return Result.failure(from_pydantic(e))

        changes = {
            k: v for k, v in patch.model_dump(exclude_unset=True).items() if v is not None or k == "notes"
        }
        changes = _clamp_percentages(changes, observation_id)
        changes["updated_at"] = self._clock()
        # model_copy skips validation; every change above is already validated
        self._items[observation_id] = current.model_copy(update=changes)
        logger.info("observation_updated", project_id=self.project_id, observation_id=observation_id, fields=sorted(changes))
        self._mark_dirty()
        return Result.success()

    def remove(self, observation_id: str) -> Result[None]:
        if self._items.pop(observation_id, None) is None:
            logger.info("observation_not_found", project_id=self.project_id, observation_id=observation_id)
            return Result.failure(NotFoundError(f"Observation {observation_id} not found", observation_id=observation_id))
        logger.info("observation_removed", project_id=self.project_id, observation_id=observation_id)
        self._mark_dirty()
        return Result.success()

    def list(self) -> list[DailyObservation]:
        return sorted(self._items.values(), key=_sort_key)

    def __len__(self) -> int:
        return len(self._items)
