from dataclasses import dataclass
from typing import Generic, TypeVar

import pydantic

T = TypeVar("T")

@dataclass
class ValidationError:
    message: str
    field: str | None = None
    sheet: str | None = None
    row_num: int | None = None

@dataclass
class NotFoundError:
    message: str
    observation_id: str | None = None

@dataclass
class RollupWarning:
    observation_id: str
    date: str
    message: str

@dataclass
class Result(Generic[T]):
    ok: bool
    data: T | None = None
    error: ValidationError | NotFoundError | None = None

    @classmethod
    def success(cls, data: T | None = None) -> "Result[T]":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: ValidationError | NotFoundError) -> "Result[T]":
        return cls(ok=False, error=error)

def from_pydantic(exc: pydantic.ValidationError) -> ValidationError:
    first = exc.errors()[0]
    field = ".".join(str(p) for p in first.get("loc", ())) or None
    msg = first.get("msg", "invalid value")
    if field:
        msg = f"{field}: {msg}"
    return ValidationError(msg, field=field)
