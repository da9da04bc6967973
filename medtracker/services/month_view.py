# medtracker/services/month_view.py
from __future__ import annotations

import calendar
import datetime as dt
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from medtracker.schemas.models import DoseOccurrence, MedicationStatement
from medtracker.services.schedule import project_many, sunday_weekday


@dataclass(frozen=True)
class CalendarDay:
    date: dt.date
    is_current_month: bool


@dataclass(frozen=True)
class CalendarDayDoses:
    day: CalendarDay
    doses: List[Tuple[str, DoseOccurrence]] = field(default_factory=list)


def month_grid(year: int, month: int) -> List[CalendarDay]:
    """
    Sunday-first month grid: trailing days of the previous month to fill the
    first week, then every day of the month. No padding after the last day.
    """
    first = dt.date(year, month, 1)
    lead = sunday_weekday(first)

    days = [
        CalendarDay(date=first - dt.timedelta(days=lead - i), is_current_month=False)
        for i in range(lead)
    ]
    n_days = calendar.monthrange(year, month)[1]
    days.extend(
        CalendarDay(date=dt.date(year, month, d), is_current_month=True)
        for d in range(1, n_days + 1)
    )
    return days


def project_month(
    meds: Sequence[MedicationStatement],
    year: int,
    month: int,
    regimen_start: dt.date,
) -> List[CalendarDayDoses]:
    out: List[CalendarDayDoses] = []
    for day in month_grid(year, month):
        doses = [(m.medication, occ) for m, occ in project_many(meds, day.date, regimen_start)]
        out.append(CalendarDayDoses(day=day, doses=doses))
    return out
