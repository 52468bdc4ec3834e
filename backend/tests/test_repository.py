from me_engine.services.repository import LogRepository
from me_engine.services.validators import NotFoundError, ValidationError

from conftest import PROJECT, TickingClock


def _repo():
    counter = iter(range(1, 1000))
    return LogRepository(PROJECT, clock=TickingClock(), id_factory=lambda: f"log-{next(counter)}")


def test_add_assigns_id_and_audit_fields(make_draft):
    repo = _repo()
    res = repo.add(make_draft("2024-01-15", 25, 20))
    assert res.ok
    obs = res.data
    assert obs.id == "log-1"
    assert obs.date == "2024-01-15"
    assert obs.created_at == obs.updated_at
    assert repo.get("log-1") == obs

def test_list_is_ordered_by_date(make_draft):
    repo = _repo()
    for d in ("2024-01-17", "2024-01-15", "2024-01-16"):
        repo.add(make_draft(d, 10, 10))
    assert [o.date for o in repo.list()] == ["2024-01-15", "2024-01-16", "2024-01-17"]

def test_add_accepts_camel_case_and_alternate_date_format(make_draft):
    repo = _repo()
    res = repo.add({
        "projectId": PROJECT,
        "date": "16.01.2024",
        "physicalProgress": "28",
        "financialProgress": 25,
        "accomplishments": "Concrete pouring started\nQuality inspection passed\n",
        "weather": "cloudy",
        "laborCount": 18,
        "equipmentStatus": "partial",
        "createdBy": "user1",
    })
    assert res.ok
    assert res.data.date == "2024-01-16"
    assert res.data.physical_progress == 28.0
    assert res.data.accomplishments == ["Concrete pouring started", "Quality inspection passed"]
    assert res.data.issues == []

def test_add_rejects_bad_date(make_draft):
    repo = _repo()
    res = repo.add(make_draft("2024-02-30", 10, 10))
    assert not res.ok
    assert isinstance(res.error, ValidationError)
    assert res.error.field == "date"
    assert len(repo) == 0

def test_add_rejects_bad_fields(make_draft):
    repo = _repo()
    assert not repo.add(make_draft("2024-01-15", "lots", 10)).ok
    assert not repo.add(make_draft("2024-01-15", float("nan"), 10)).ok
    assert not repo.add(make_draft("2024-01-15", 10, 10, labor_count=-1)).ok
    assert not repo.add(make_draft("2024-01-15", 10, 10, weather="foggy")).ok
    assert not repo.add(make_draft("2024-01-15", 10, 10, equipment_status="broken")).ok
    assert not repo.add(make_draft("2024-01-15", 10, 10, created_by="")).ok
    assert len(repo) == 0

def test_add_rejects_other_project(make_draft):
    repo = _repo()
    res = repo.add(make_draft("2024-01-15", 10, 10, project_id="P-2"))
    assert not res.ok
    assert res.error.field == "projectId"

def test_percentages_are_clamped(make_draft):
    repo = _repo()
    obs = repo.add(make_draft("2024-01-15", 120, -5)).data
    assert obs.physical_progress == 100.0
    assert obs.financial_progress == 0.0

def test_update_changes_fields_and_refreshes_timestamp(make_draft):
    repo = _repo()
    obs = repo.add(make_draft("2024-01-15", 25, 20)).data
    res = repo.update(obs.id, {"physicalProgress": 140, "issues": "Crane down"})
    assert res.ok
    updated = repo.get(obs.id)
    assert updated.physical_progress == 100.0
    assert updated.issues == ["Crane down"]
    assert updated.financial_progress == 20
    assert updated.created_at == obs.created_at
    assert updated.updated_at > obs.updated_at

def test_update_unknown_id():
    res = _repo().update("nope", {"notes": "x"})
    assert not res.ok
    assert isinstance(res.error, NotFoundError)
    assert res.error.observation_id == "nope"

def test_update_rejects_immutable_and_invalid_fields(make_draft):
    repo = _repo()
    obs = repo.add(make_draft("2024-01-15", 25, 20)).data
    assert isinstance(repo.update(obs.id, {"id": "other"}).error, ValidationError)
    assert isinstance(repo.update(obs.id, {"createdBy": "mallory"}).error, ValidationError)
    assert isinstance(repo.update(obs.id, {"date": "not a date"}).error, ValidationError)
    assert repo.get(obs.id) == obs

def test_remove(make_draft):
    repo = _repo()
    obs = repo.add(make_draft("2024-01-15", 25, 20)).data
    assert repo.remove(obs.id).ok
    assert repo.list() == []
    assert isinstance(repo.remove(obs.id).error, NotFoundError)

def test_dirty_signal_only_on_successful_mutation(make_draft):
    repo = _repo()
    calls = []
    repo.subscribe(lambda: calls.append(1))
    obs = repo.add(make_draft("2024-01-15", 25, 20)).data
    repo.add(make_draft("bad", 25, 20))
    repo.update(obs.id, {"notes": "ok"})
    repo.update("missing", {"notes": "ok"})
    repo.remove("missing")
    repo.remove(obs.id)
    assert len(calls) == 3

def test_add_many_is_one_mutation(make_draft):
    repo = _repo()
    calls = []
    repo.subscribe(lambda: calls.append(1))
    added, errors = repo.add_many([
        make_draft("2024-01-15", 25, 20),
        make_draft("2024-13-01", 25, 20),
        make_draft("2024-01-16", 28, 25),
    ])
    assert len(added) == 2
    assert len(errors) == 1
    assert errors[0].row_num == 2
    assert len(calls) == 1

def test_load_keeps_records_with_unparseable_dates(make_draft):
    repo = _repo()
    good = repo.add(make_draft("2024-01-15", 25, 20)).data
    bad = good.model_copy(update={"id": "legacy-1", "date": "15/01/24?"})
    repo.load([good, bad.dump()])
    assert [o.id for o in repo.list()] == [good.id, "legacy-1"]

def test_load_rejects_malformed_records(make_draft):
    repo = _repo()
    calls = []
    repo.subscribe(lambda: calls.append(1))
    good = repo.add(make_draft("2024-01-15", 25, 20)).data
    missing = good.dump()
    del missing["physicalProgress"]
    errors = repo.load([good, {**good.dump(), "id": "legacy-1", "weather": "foggy"}, {**missing, "id": "legacy-2"}])
    assert all(isinstance(e, ValidationError) for e in errors)
    assert [(e.field, e.row_num) for e in errors] == [("weather", 2), ("physicalProgress", 3)]
    assert [o.id for o in repo.list()] == [good.id]
    assert len(calls) == 1
