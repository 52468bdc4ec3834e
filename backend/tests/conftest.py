import datetime as dt
import itertools

import pytest

from me_engine.services.engine import MEEngine

PROJECT = "P-1"


class TickingClock:
    def __init__(self, start: dt.datetime = dt.datetime(2024, 1, 20, 12, 0, tzinfo=dt.timezone.utc)):
        self.now = start

    def __call__(self) -> dt.datetime:
        self.now += dt.timedelta(minutes=1)
        return self.now


def _sequential_ids():
    counter = itertools.count(1)
    return lambda: f"log-{next(counter)}"


@pytest.fixture
def make_draft():
    def _make(date, physical, financial, **kw):
        d = dict(
            project_id=PROJECT,
            date=date,
            physical_progress=physical,
            financial_progress=financial,
            accomplishments=[],
            issues=[],
            weather="sunny",
            labor_count=10,
            equipment_status="operational",
            created_by="user1",
        )
        d.update(kw)
        return d
    return _make


@pytest.fixture
def engine():
    return MEEngine(PROJECT, total_budget=1_000_000, clock=TickingClock(), id_factory=_sequential_ids())


@pytest.fixture
def seeded(engine, make_draft):
    engine.add_observation(make_draft("2024-01-15", 25, 20, weather="rainy", labor_count=15,
                                      accomplishments=["Foundation work completed", "Steel reinforcement installed"],
                                      issues=["Weather delay", "Material delivery delayed"]))
    engine.add_observation(make_draft("2024-01-16", 28, 25, labor_count=18,
                                      accomplishments=["Concrete pouring started", "Quality inspection passed"]))
    engine.add_observation(make_draft("2024-01-17", 32, 30, weather="cloudy", labor_count=20,
                                      accomplishments=["Structural framework erected", "Site safety inspection completed"],
                                      issues=["Minor equipment malfunction resolved"]))
    engine.add_observation(make_draft("2024-01-22", 38, 35, labor_count=22,
                                      accomplishments=["Electrical wiring phase started", "Material inventory updated"]))
    return engine
