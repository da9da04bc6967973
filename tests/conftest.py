"""
Shared fixtures for the medication tracker tests.
"""
import datetime as dt

import pytest

from medtracker.schemas.models import MedicationStatement, TimingPhase

# 2024-01-07 is a Sunday
SUNDAY = dt.date(2024, 1, 7)


def phase(**kwargs) -> TimingPhase:
    kwargs.setdefault("dose_amount", 1)
    kwargs.setdefault("is_as_needed", False)
    return TimingPhase(**kwargs)


def med(*phases: TimingPhase, name: str = "testmed") -> MedicationStatement:
    return MedicationStatement(
        medication=name,
        rxnorm_code="unknown",
        strength={"amount": 10, "unit": "mg"},
        source_text=f"{name} 10mg",
        timing_sequence=list(phases),
    )


def day(n: int) -> dt.date:
    return SUNDAY + dt.timedelta(days=n)


@pytest.fixture
def start() -> dt.date:
    return SUNDAY
