# medtracker/services/llm/extraction_sanitize.py
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from medtracker.schemas.models import MedicationData, MedicationStatement
from medtracker.schemas.timing import WEEKDAY_NAMES, sequence_issues, valid_hhmm

logger = logging.getLogger(__name__)

_AMPM_RE = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\.?$", re.I)
_LOOSE_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

_WEEKDAY_ABBR = {name[:3]: name for name in WEEKDAY_NAMES}

def _num(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    if f != f:  # NaN
        return None
    return f

def _int(v: Any) -> Optional[int]:
    f = _num(v)
    return int(round(f)) if f is not None else None

def _str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None

def normalize_time(raw: Any) -> Optional[str]:
    """'9:00' -> '09:00', '9pm' -> '21:00'; anything else is dropped."""
    s = (_str(raw) or "").lower()
    if valid_hhmm(s):
        return s

    m = _LOOSE_HHMM_RE.match(s)
    if m:
        out = f"{int(m.group(1)):02d}:{m.group(2)}"
        return out if valid_hhmm(out) else None

    m = _AMPM_RE.match(s)
    if m:
        h = int(m.group(1))
        mins = int(m.group(2) or 0)
        if not 1 <= h <= 12:
            return None
        if m.group(3) == "p" and h != 12:
            h += 12
        if m.group(3) == "a" and h == 12:
            h = 0
        out = f"{h:02d}:{mins:02d}"
        return out if valid_hhmm(out) else None
    return None

def normalize_weekday(raw: Any) -> Optional[str]:
    s = (_str(raw) or "").lower()
    if s in WEEKDAY_NAMES:
        return s
    return _WEEKDAY_ABBR.get(s[:3]) if len(s) >= 3 else None

def _str_list(v: Any) -> List[str]:
    if not isinstance(v, (list, tuple)):
        return []
    return [s for s in (_str(x) for x in v) if s]

def sanitize_phase(raw: Dict[str, Any]) -> Dict[str, Any]:
    phase: Dict[str, Any] = {
        "isAsNeeded": raw.get("isAsNeeded") is True
        or str(raw.get("isAsNeeded", "")).strip().lower() == "true",
        "doseAmount": _num(raw.get("doseAmount")) or 1.0,
    }

    for key in ("orderInSequence", "period", "periodMax", "duration", "count"):
        v = _num(raw.get(key))
        if v is not None:
            phase[key] = v
    for key in ("frequency", "frequencyMax"):
        v = _int(raw.get(key))
        if v is not None:
            phase[key] = v
    for key in ("doseUnit", "periodUnit", "durationUnit", "rawText"):
        v = _str(raw.get(key))
        if v is not None:
            phase[key] = v

    if "specificTimes" in raw:
        times = [t for t in (normalize_time(x) for x in (raw.get("specificTimes") or [])) if t]
        if times:
            phase["specificTimes"] = times

    cats = _str_list(raw.get("timeCategories"))
    if cats:
        phase["timeCategories"] = cats

    days = []
    for w in (raw.get("weekdays") or []):
        d = normalize_weekday(w)
        if d and d not in days:
            days.append(d)
    if days:
        phase["weekdays"] = days

    return phase

def _sanitize_statement(raw: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    name = _str(raw.get("medication")) or _str(raw.get("genericName")) or _str(raw.get("brandName"))
    if not name:
        return None

    strength_raw = raw.get("strength") if isinstance(raw.get("strength"), dict) else {}
    amount = _num(strength_raw.get("amount"))
    unit = _str(strength_raw.get("unit"))

    phases = [
        sanitize_phase(p) for p in (raw.get("timingSequence") or []) if isinstance(p, dict)
    ]

    out = {
        "medication": name,
        "rxnormCode": _str(raw.get("rxnormCode")) or "unknown",
        "strength": {"amount": amount if amount is not None else 0.0, "unit": unit or "unknown"},
        "sourceText": _str(raw.get("sourceText")) or "",
        "timingSequence": phases,
    }
    for key in ("brandName", "genericName", "form"):
        v = _str(raw.get(key))
        if v is not None:
            out[key] = v
    return out

def sanitize_medication_data(raw: Dict[str, Any]) -> MedicationData:
    """
    Best-effort coercion of the extraction JSON into MedicationData.
    Statements without a name are dropped; malformed sequences are kept
    as-is (projection handles them) but logged.
    """
    items = raw.get("medicationStatements") if isinstance(raw, dict) else None
    statements: List[MedicationStatement] = []

    for item in items or []:
        if not isinstance(item, dict):
            continue
        cleaned = _sanitize_statement(item)
        if cleaned is None:
            continue
        try:
            stmt = MedicationStatement.model_validate(cleaned)
        except ValidationError as e:
            logger.warning("dropping medication statement %r: %s", cleaned.get("medication"), e)
            continue

        issues = sequence_issues(stmt.timing_sequence)
        if issues:
            logger.warning("timing issues for %s: %s", stmt.medication, "; ".join(issues))
        statements.append(stmt)

    # de-duplicate by medication name, last one wins
    by_name: Dict[str, MedicationStatement] = {}
    for s in statements:
        by_name[s.medication.strip().lower()] = s

    free_text = _str(raw.get("freeTextResponse")) if isinstance(raw, dict) else None
    return MedicationData(
        medication_statements=list(by_name.values()),
        free_text_response=free_text,
    )
