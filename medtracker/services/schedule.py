# medtracker/services/schedule.py
"""
Dose-schedule projection.

Given a medication's timing sequence, a target date and the regimen start date,
work out whether (and at what clock times) doses occur on the target date.

Pure: no I/O, no wall-clock reads. "Today" only enters through `regimen_start`,
which callers fix once for a whole medication list.
"""
from __future__ import annotations

import datetime as dt
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from medtracker.schemas.models import (
    AsNeededOccurrence,
    DoseOccurrence,
    MedicationStatement,
    ScheduledOccurrence,
    TimingPhase,
)
from medtracker.schemas.timing import WEEKDAY_NAMES, compile_timing_sequence

DateLike = Union[dt.date, dt.datetime]

DAY_START_HOUR = 8
DAY_END_HOUR = 20

# doses per day -> clock times
FREQUENCY_TIMES: Dict[int, Tuple[str, ...]] = {
    1: ("08:00",),
    2: ("08:00", "20:00"),
    3: ("08:00", "14:00", "20:00"),
    4: ("08:00", "12:00", "16:00", "20:00"),
}

# checked in order; first substring hit wins
CATEGORY_TIMES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("morn",), "08:00"),
    (("noon", "afternoon"), "14:00"),
    (("even", "night"), "20:00"),
    (("bed",), "22:00"),
)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _as_date(value: DateLike) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    return value


def sunday_weekday(d: dt.date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (d.weekday() + 1) % 7


def weekday_name(d: dt.date) -> str:
    return WEEKDAY_NAMES[sunday_weekday(d)]


def times_for_frequency(
    frequency: int,
    table: Dict[int, Sequence[str]] = FREQUENCY_TIMES,
) -> List[str]:
    """
    Clock times for `frequency` doses in a day. Beyond the table, doses are
    spread evenly from DAY_START_HOUR to DAY_END_HOUR inclusive.
    0 (unknown) still yields a single morning dose.
    """
    frequency = max(1, int(frequency or 0))
    if frequency in table:
        return list(table[frequency])

    step = (DAY_END_HOUR - DAY_START_HOUR) / (frequency - 1)
    return [f"{_round_half_up(DAY_START_HOUR + step * i):02d}:00" for i in range(frequency)]


def category_time(category: str, table=CATEGORY_TIMES) -> Optional[str]:
    c = (category or "").lower()
    for needles, hhmm in table:
        if any(n in c for n in needles):
            return hhmm
    return None


def times_for_categories(categories: Iterable[str], table=CATEGORY_TIMES) -> List[str]:
    """Unrecognized categories are dropped."""
    out: List[str] = []
    for cat in categories or []:
        t = category_time(cat, table)
        if t is not None:
            out.append(t)
    return out


def _every_n(period: Optional[float]) -> float:
    return max(1.0, float(period or 1))


def _unit(phase: TimingPhase) -> str:
    return (phase.period_unit or "day").strip().lower()


def _period_gate(phase: TimingPhase, days_into_phase: int) -> bool:
    """Day / week repetition counted from the start of the phase window."""
    unit = _unit(phase)
    every = _every_n(phase.period)
    if unit.startswith("day"):
        return days_into_phase % every == 0
    if unit.startswith("week"):
        return (days_into_phase // 7) % every == 0
    return True


def _gated_occurrence(
    phase: TimingPhase,
    times: List[str],
    target: dt.date,
    days_into_phase: int,
) -> Optional[ScheduledOccurrence]:
    if phase.weekdays:
        allowed = {w.strip().lower() for w in phase.weekdays}
        if weekday_name(target) not in allowed:
            return None
    elif not _period_gate(phase, days_into_phase):
        return None

    return ScheduledOccurrence(
        times=list(times),
        dose_amount=phase.dose_amount,
        dose_unit=phase.dose_unit,
        source="explicit",
        explicit_weekdays=list(phase.weekdays) if phase.weekdays else None,
        time_categories=list(phase.time_categories) if phase.time_categories else None,
    )


def _calculated_occurrence(
    phase: TimingPhase,
    target: dt.date,
    start: dt.date,
    days_into_phase: int,
) -> Optional[ScheduledOccurrence]:
    frequency = max(0, phase.frequency or 0)
    unit = _unit(phase)
    every = _every_n(phase.period)

    if unit.startswith("day"):
        if days_into_phase % every != 0:
            return None
        times = times_for_frequency(frequency)

    elif unit.startswith("week"):
        if (days_into_phase // 7) % every != 0:
            return None
        per_week = min(7, max(1, frequency))
        base = sunday_weekday(start)
        chosen = {(base + _round_half_up(i * 7 / per_week)) % 7 for i in range(per_week)}
        if sunday_weekday(target) not in chosen:
            return None
        times = times_for_frequency(per_week)

    else:
        times = times_for_frequency(frequency)

    return ScheduledOccurrence(
        times=times,
        dose_amount=phase.dose_amount,
        dose_unit=phase.dose_unit,
        source="calculated",
    )


def occurrence_for_phase(
    phase: TimingPhase,
    target: dt.date,
    start: dt.date,
    days_into_phase: int,
) -> Optional[DoseOccurrence]:
    if phase.is_as_needed:
        if phase.frequency_max is not None:
            max_doses = phase.frequency_max
        elif phase.frequency is not None:
            max_doses = phase.frequency
        else:
            max_doses = 1
        return AsNeededOccurrence(
            max=max_doses,
            dose_amount=phase.dose_amount,
            dose_unit=phase.dose_unit,
        )

    if phase.specific_times:
        return _gated_occurrence(phase, phase.specific_times, target, days_into_phase)

    if phase.time_categories:
        mapped = times_for_categories(phase.time_categories)
        if mapped:
            return _gated_occurrence(phase, mapped, target, days_into_phase)

    return _calculated_occurrence(phase, target, start, days_into_phase)


def day_offset(target_date: DateLike, regimen_start: DateLike) -> int:
    return (_as_date(target_date) - _as_date(regimen_start)).days


def project(
    med: MedicationStatement,
    target_date: DateLike,
    regimen_start: DateLike,
) -> Optional[DoseOccurrence]:
    """
    Dose occurrence for `med` on `target_date`, or None.

    Phases are laid out back to back from the regimen start; the first phase
    whose window holds the target date decides the result. A window ends
    exclusive of its last day offset (a 7 day phase covers offsets 0..6).
    """
    target = _as_date(target_date)
    start = _as_date(regimen_start)
    offset = (target - start).days
    if offset < 0:
        return None

    for window in compile_timing_sequence(med.timing_sequence):
        if window.contains(offset):
            return occurrence_for_phase(window.phase, target, start, offset - window.start)

    return None


def project_many(
    meds: Iterable[MedicationStatement],
    target_date: DateLike,
    regimen_start: DateLike,
) -> List[Tuple[MedicationStatement, DoseOccurrence]]:
    out: List[Tuple[MedicationStatement, DoseOccurrence]] = []
    for med in meds:
        occ = project(med, target_date, regimen_start)
        if occ is not None:
            out.append((med, occ))
    return out
