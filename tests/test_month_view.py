"""
Tests for the Sunday-first month grid and per-day projection.
"""
import datetime as dt

from medtracker.services.month_view import month_grid, project_month

from conftest import med, phase


def test_grid_leads_with_previous_month():
    # 2024-02-01 is a Thursday
    days = month_grid(2024, 2)
    assert len(days) == 4 + 29
    assert days[0].date == dt.date(2024, 1, 28)
    assert not days[0].is_current_month
    assert days[4].date == dt.date(2024, 2, 1)
    assert days[4].is_current_month
    assert days[-1].date == dt.date(2024, 2, 29)


def test_grid_month_starting_sunday():
    days = month_grid(2024, 9)
    assert days[0].date == dt.date(2024, 9, 1)
    assert all(d.is_current_month for d in days)
    assert len(days) == 30


def test_project_month_uses_fixed_regimen_start():
    meds = [
        med(phase(frequency=1), name="daily"),
        med(phase(is_as_needed=True, frequency_max=3), name="prn"),
    ]
    start = dt.date(2024, 2, 10)
    out = project_month(meds, 2024, 2, start)

    by_date = {d.day.date: d.doses for d in out}
    assert by_date[dt.date(2024, 2, 9)] == []
    names = [name for name, _ in by_date[start]]
    assert names == ["daily", "prn"]
    assert by_date[dt.date(2024, 2, 29)][0][1].times == ["08:00"]
