# medtracker/schemas/timing.py
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from medtracker.schemas.models import TimingPhase

logger = logging.getLogger(__name__)

# Sunday first: index == Sunday-based weekday number
WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

_HHMM_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

# unit prefix / code -> (multiplier, divisor) to whole days
DURATION_UNIT_DAYS = {
    "h": (1, 24),
    "hour": (1, 24),
    "d": (1, 1),
    "day": (1, 1),
    "w": (7, 1),
    "wk": (7, 1),
    "week": (7, 1),
    "mo": (30, 1),
    "month": (30, 1),
    "a": (365.25, 1),
    "y": (365.25, 1),
    "yr": (365.25, 1),
    "year": (365.25, 1),
}

# leading letters -> DURATION_UNIT_DAYS key, for "wks", "hrs", "mos"
_UNIT_PREFIXES = (
    ("mo", "month"),
    ("h", "hour"),
    ("d", "day"),
    ("w", "week"),
    ("y", "year"),
    ("a", "year"),
)


class MalformedTimingSequence(ValueError):
    pass


def valid_hhmm(value: Any) -> bool:
    return isinstance(value, str) and bool(_HHMM_RE.match(value))


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def is_well_formed(phase: Union[TimingPhase, Mapping[str, Any]]) -> bool:
    """
    Checks a single phase (model or raw camelCase mapping):
      - isAsNeeded is a boolean
      - specificTimes entries are 24-hour HH:MM
      - weekdays entries are canonical lowercase weekday names
      - frequency / period / duration are non-negative numbers when present
    """
    if isinstance(phase, TimingPhase):
        data = phase.model_dump(by_alias=True)
    elif isinstance(phase, Mapping):
        data = dict(phase)
    else:
        return False

    if not isinstance(data.get("isAsNeeded"), bool):
        return False

    times = data.get("specificTimes")
    if times is not None:
        if not isinstance(times, (list, tuple)) or not all(valid_hhmm(t) for t in times):
            return False

    weekdays = data.get("weekdays")
    if weekdays is not None:
        if not isinstance(weekdays, (list, tuple, set, frozenset)):
            return False
        if not all(isinstance(w, str) and w in WEEKDAY_NAMES for w in weekdays):
            return False

    for key in ("frequency", "period", "duration"):
        v = data.get(key)
        if v is None:
            continue
        if not _is_number(v) or v < 0:
            return False

    return True


def _unit_days(unit: Optional[str]) -> Tuple[float, int]:
    """Exact code first, then by leading letters."""
    u = (unit or "day").strip().lower().rstrip(".")
    if u in DURATION_UNIT_DAYS:
        return DURATION_UNIT_DAYS[u]
    for prefix, code in _UNIT_PREFIXES:
        if u.startswith(prefix):
            return DURATION_UNIT_DAYS[code]
    logger.warning("unknown duration unit %r, counting as days", unit)
    return (1, 1)


def duration_to_days(duration: Optional[float], unit: Optional[str]) -> Optional[int]:
    """Whole days for a duration, truncated toward zero. None means open-ended."""
    if duration is None:
        return None
    mul, div = _unit_days(unit)
    days = math.trunc(duration * mul / div)
    return max(0, days)


@dataclass(frozen=True)
class BoundedPhase:
    start: int
    window_days: int
    phase: TimingPhase

    @property
    def end(self) -> int:
        # exclusive
        return self.start + self.window_days

    def contains(self, day_offset: int) -> bool:
        return self.start <= day_offset < self.end


@dataclass(frozen=True)
class UnboundedPhase:
    start: int
    phase: TimingPhase

    def contains(self, day_offset: int) -> bool:
        return day_offset >= self.start


PhaseWindow = Union[BoundedPhase, UnboundedPhase]


def compile_timing_sequence(
    sequence: Sequence[TimingPhase],
    strict: bool = False,
) -> Tuple[PhaseWindow, ...]:
    """
    Lays phases out on the day-offset timeline, contiguously from offset 0.
    An open-ended phase must be the last one. Phases after it are unreachable:
    strict mode rejects them, otherwise they are dropped with a warning.
    """
    windows: List[PhaseWindow] = []
    start = 0

    for idx, phase in enumerate(sequence):
        days = duration_to_days(phase.duration, phase.duration_unit)
        if days is None:
            windows.append(UnboundedPhase(start=start, phase=phase))
            rest = len(sequence) - idx - 1
            if rest:
                if strict:
                    raise MalformedTimingSequence(
                        f"open-ended phase at position {idx} is followed by {rest} more phase(s)"
                    )
                logger.warning("dropping %d unreachable phase(s) after open-ended phase %d", rest, idx)
            break

        windows.append(BoundedPhase(start=start, window_days=days, phase=phase))
        start += days

    return tuple(windows)


def sequence_issues(sequence: Sequence[Union[TimingPhase, Mapping[str, Any]]]) -> List[str]:
    issues: List[str] = []
    open_ended_at: Optional[int] = None

    for idx, phase in enumerate(sequence):
        if not is_well_formed(phase):
            issues.append(f"phase {idx}: not well formed")

        if isinstance(phase, TimingPhase):
            duration = phase.duration
        else:
            duration = phase.get("duration") if isinstance(phase, Mapping) else None

        if duration is None:
            if open_ended_at is None:
                open_ended_at = idx
        elif _is_number(duration) and duration < 0:
            issues.append(f"phase {idx}: negative duration {duration}")

    if open_ended_at is not None and open_ended_at < len(sequence) - 1:
        issues.append(
            f"phase {open_ended_at}: open-ended phase is not last; "
            f"{len(sequence) - open_ended_at - 1} later phase(s) are unreachable"
        )
    return issues
