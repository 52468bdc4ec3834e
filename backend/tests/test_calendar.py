import datetime as dt

import pytest

from me_engine.services.calendar import iso_week_of, month_bounds, quarter_bounds, quarter_of, week_bounds
from me_engine.services.etl.utils import split_notes, to_date

def test_iso_week_mid_january():
    assert iso_week_of(dt.date(2024, 1, 15)) == (2024, 3)

def test_iso_week_year_boundaries():
    # late December in week 1 of the next year, early January in week 53 of the previous one
    assert iso_week_of(dt.date(2024, 12, 30)) == (2025, 1)
    assert iso_week_of(dt.date(2021, 1, 1)) == (2020, 53)
    assert iso_week_of(dt.date(2020, 12, 31)) == (2020, 53)

def test_quarter_of():
    assert [quarter_of(m) for m in range(1, 13)] == [1, 1, 1, 2, 2, 2, 3, 3, 3, 4, 4, 4]
    with pytest.raises(ValueError):
        quarter_of(13)

def test_week_bounds_approx_is_fixed_offset_from_jan_1():
    assert week_bounds(2024, 3) == (dt.date(2024, 1, 15), dt.date(2024, 1, 21))
    assert week_bounds(2021, 1) == (dt.date(2021, 1, 1), dt.date(2021, 1, 7))

def test_week_bounds_iso_starts_on_monday():
    start, end = week_bounds(2021, 1, "iso")
    assert start == dt.date(2021, 1, 4)
    assert end == dt.date(2021, 1, 10)
    assert start.weekday() == 0

def test_month_and_quarter_bounds():
    assert month_bounds(2024, 2) == (dt.date(2024, 2, 1), dt.date(2024, 2, 29))
    assert quarter_bounds(2024, 4) == (dt.date(2024, 10, 1), dt.date(2024, 12, 31))

def test_to_date_formats():
    assert to_date("2024-01-15") == dt.date(2024, 1, 15)
    assert to_date("15.01.2024") == dt.date(2024, 1, 15)
    assert to_date(dt.datetime(2024, 1, 15, 8, 30)) == dt.date(2024, 1, 15)
    assert to_date(45306) == dt.date(2024, 1, 15)  # excel serial
    assert to_date("2024-02-30") is None
    assert to_date("yesterday") is None
    assert to_date(None) is None

def test_split_notes():
    assert split_notes("Poured slab\n\n  Framing done ") == ["Poured slab", "Framing done"]
    assert split_notes("a; b;") == ["a", "b"]
    assert split_notes([" x ", ""]) == ["x"]
    assert split_notes(None) == []
