# medtracker/services/summary.py
from typing import Any, Dict, List

from medtracker.schemas.models import MedicationStatement, Strength, TimingPhase


def _plural(n: float, unit: str) -> str:
    return f"{unit}s" if n > 1 else unit


def _num(v: float) -> str:
    return str(int(v)) if float(v).is_integer() else str(v)


def strength_confirmed(strength: Strength) -> bool:
    return strength.amount > 0 and strength.unit.strip().lower() != "unknown"


def strength_text(strength: Strength) -> str:
    if not strength_confirmed(strength):
        return "Unconfirmed strength"
    return f"{_num(strength.amount)} {strength.unit}"


def period_text(phase: TimingPhase) -> str:
    if not phase.frequency:
        return "Unknown timing"

    period = phase.period or 1
    unit = phase.period_unit or "day"
    period_max = phase.period_max

    if period_max and period_max != period:
        return f"every {_num(period)}–{_num(period_max)} {_plural(period_max, unit)}"
    if period == 1:
        return "daily"
    return f"every {_num(period)} {_plural(period, unit)}"


def timing_modifiers(phase: TimingPhase) -> List[str]:
    mods: List[str] = []
    if phase.is_as_needed:
        mods.append("As needed")
    if phase.specific_times:
        mods.append(f"{len(phase.specific_times)} set time(s)")
    if phase.time_categories:
        mods.append(", ".join(phase.time_categories))
    if phase.weekdays:
        mods.append(f"{len(phase.weekdays)} day(s)/week")
    if phase.duration:
        mods.append(f"{_num(phase.duration)} {_plural(phase.duration, phase.duration_unit or 'day')}")
    return mods


def phase_missing_info(phase: TimingPhase) -> bool:
    has_frequency = bool(phase.frequency and phase.frequency > 0)
    has_rhythm = phase.period is not None or bool(phase.specific_times)
    return not (has_frequency and has_rhythm)


def medication_missing_info(med: MedicationStatement) -> bool:
    if not med.timing_sequence:
        return True
    # every phase but the last needs a duration to hand over to the next one
    if any(p.duration is None for p in med.timing_sequence[:-1]):
        return True
    return any(phase_missing_info(p) for p in med.timing_sequence)


def medication_card(med: MedicationStatement) -> Dict[str, Any]:
    return {
        "medication": med.medication,
        "brandName": med.brand_name,
        "genericName": med.generic_name,
        "form": med.form,
        "strength": strength_text(med.strength),
        "strengthConfirmed": strength_confirmed(med.strength),
        "missingTimingInfo": medication_missing_info(med),
        "phases": [
            {
                "order": idx + 1,
                "dose": f"{_num(p.dose_amount)} {p.dose_unit or ''}".strip(),
                "period": period_text(p),
                "modifiers": timing_modifiers(p),
                "missingInfo": phase_missing_info(p),
                "rawText": p.raw_text,
            }
            for idx, p in enumerate(med.timing_sequence)
        ],
        "sourceText": med.source_text,
    }
