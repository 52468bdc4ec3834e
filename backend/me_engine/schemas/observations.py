import datetime as dt
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator

from me_engine.schemas._base import CamelModel
from me_engine.services.etl.utils import split_notes, to_date

Weather = Literal["sunny", "cloudy", "rainy", "stormy"]
EquipmentStatus = Literal["operational", "partial", "down"]

WEATHER_VALUES: tuple[str, ...] = ("sunny", "cloudy", "rainy", "stormy")
EQUIPMENT_VALUES: tuple[str, ...] = ("operational", "partial", "down")


class _ObservationInput(CamelModel):
    @field_validator("accomplishments", "issues", mode="before", check_fields=False)
    @classmethod
    def _split_notes(cls, v: Any) -> list[str]:
        return split_notes(v)

    @field_validator("date", mode="before", check_fields=False)
    @classmethod
    def _parse_date(cls, v: Any) -> Any:
        if v is None:
            return v
        d = to_date(v)
        if d is None:
            raise ValueError("date must be a real calendar date")
        return d.isoformat()


class ObservationDraft(_ObservationInput):
    project_id: str = Field(..., min_length=1)
    date: str
    physical_progress: float = Field(allow_inf_nan=False)
    financial_progress: float = Field(allow_inf_nan=False)
    accomplishments: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)
    weather: Weather
    labor_count: int = Field(ge=0)
    equipment_status: EquipmentStatus
    notes: str | None = None
    created_by: str = Field(..., min_length=1)


class ObservationPatch(_ObservationInput):
    model_config = ConfigDict(extra="forbid")

    date: str | None = None
    physical_progress: float | None = Field(default=None, allow_inf_nan=False)
    financial_progress: float | None = Field(default=None, allow_inf_nan=False)
    accomplishments: list[str] | None = None
    issues: list[str] | None = None
    weather: Weather | None = None
    labor_count: int | None = Field(default=None, ge=0)
    equipment_status: EquipmentStatus | None = None
    notes: str | None = None


class DailyObservation(CamelModel):
    id: str
    project_id: str
    date: str
    physical_progress: float
    financial_progress: float
    accomplishments: list[str] = Field(default_factory=list)
    issues: list[str] = Field(default_factory=list)
    weather: Weather
    labor_count: int
    equipment_status: EquipmentStatus
    notes: str | None = None
    created_by: str
    created_at: dt.datetime
    updated_at: dt.datetime

    @field_validator("date", mode="before")
    @classmethod
    def _date_text(cls, v: Any) -> Any:
        # unparseable dates are kept verbatim and reported at bucketing time
        if isinstance(v, (dt.date, dt.datetime)):
            return to_date(v).isoformat()
        return v

    @property
    def day(self) -> dt.date | None:
        return to_date(self.date)
