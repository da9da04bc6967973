"""
Tests for medication card summaries.
"""
import pytest

from medtracker.schemas.models import Strength
from medtracker.services.summary import (
    medication_card,
    medication_missing_info,
    period_text,
    phase_missing_info,
    strength_confirmed,
    strength_text,
    timing_modifiers,
)

from conftest import med, phase


@pytest.mark.parametrize("kwargs, expected", [
    ({}, "Unknown timing"),
    ({"frequency": 0}, "Unknown timing"),
    ({"frequency": 1}, "daily"),
    ({"frequency": 1, "period": 2, "period_unit": "day"}, "every 2 days"),
    ({"frequency": 1, "period": 4, "period_max": 6, "period_unit": "hour"}, "every 4–6 hours"),
    ({"frequency": 1, "period": 3, "period_unit": "week"}, "every 3 weeks"),
])
def test_period_text(kwargs, expected):
    assert period_text(phase(**kwargs)) == expected


def test_timing_modifiers():
    p = phase(
        is_as_needed=True,
        specific_times=["08:00", "20:00"],
        time_categories=["morning", "evening"],
        weekdays=["monday"],
        duration=10,
        duration_unit="day",
    )
    assert timing_modifiers(p) == [
        "As needed",
        "2 set time(s)",
        "morning, evening",
        "1 day(s)/week",
        "10 days",
    ]


def test_missing_info_flags():
    assert phase_missing_info(phase())
    assert phase_missing_info(phase(frequency=2))
    assert not phase_missing_info(phase(frequency=2, period=1))
    assert not phase_missing_info(phase(frequency=1, specific_times=["09:00"]))

    assert medication_missing_info(med())
    assert not medication_missing_info(med(phase(frequency=1, period=1)))


def test_missing_info_when_earlier_phase_has_no_duration():
    daily = {"frequency": 1, "period": 1}
    assert medication_missing_info(med(phase(**daily), phase(**daily)))
    assert not medication_missing_info(med(phase(duration=7, **daily), phase(**daily)))


def test_strength():
    assert strength_confirmed(Strength(amount=10, unit="mg"))
    assert not strength_confirmed(Strength(amount=0, unit="mg"))
    assert not strength_confirmed(Strength(amount=5, unit="unknown"))
    assert strength_text(Strength(amount=10, unit="mg")) == "10 mg"
    assert strength_text(Strength(amount=0, unit="unknown")) == "Unconfirmed strength"


def test_medication_card():
    card = medication_card(med(phase(frequency=2, period=1, dose_amount=2, dose_unit="tablet")))
    assert card["medication"] == "testmed"
    assert card["strength"] == "10 mg"
    assert card["missingTimingInfo"] is False
    assert card["phases"][0]["dose"] == "2 tablet"
    assert card["phases"][0]["period"] == "daily"
