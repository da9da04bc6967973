import logging
import re
from typing import Any, Dict, List, Optional

from medtracker.schemas.models import MedicationData, MedicationStatement
from medtracker.schemas.timing import sequence_issues
from medtracker.services.llm.extraction_sanitize import normalize_time, normalize_weekday

logger = logging.getLogger(__name__)

# phrase -> doses per day
FREQ_MAP = {
    "once daily": 1, "once a day": 1, "once": 1, "od": 1, "qd": 1, "1x": 1, "daily": 1,
    "twice daily": 2, "twice a day": 2, "twice": 2, "bd": 2, "bid": 2, "2x": 2,
    "thrice daily": 3, "three times": 3, "thrice": 3, "tid": 3, "3x": 3,
    "four times": 4, "qid": 4, "4x": 4,
}

_MED_HINT_RE = re.compile(
    r"\b(tab|tabs|tablet|tablets|cap|caps|capsule|capsules|mg|mcg|ml|od|bd|bid|tid|qid|daily|weekly|prn|as needed)\b",
    re.I,
)
_STRENGTH_RE = re.compile(r"(\d+(?:\.\d+)?)\s?(mg|mcg|g|ml|iu|units?)\b", re.I)
_NAME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9\-]*(?: [A-Za-z][A-Za-z0-9\-]*)*?)(?=\s+\d|\s*,|\s*$|\s+(?:tab|cap|once|twice|daily|every|as|prn|at|in|on|for|bid|tid|qid|od|bd)\b)", re.I)
_TIMES_PER_RE = re.compile(r"\b(\d+)\s*(?:x|times)\s*(?:a|per)?\s*(day|week)\b", re.I)
_EVERY_N_RE = re.compile(r"\bevery\s+(\d+)\s*(?:to|-|–)?\s*(\d+)?\s*(hour|day|week)s?\b", re.I)
_EVERY_OTHER_RE = re.compile(r"\bevery other day\b", re.I)
_WEEKLY_RE = re.compile(r"\b(weekly|once a week|every week)\b", re.I)
_DURATION_RE = re.compile(r"\b(?:for|x)\s*(\d+)\s*(day|week|month)s?\b", re.I)
_DOSE_RE = re.compile(r"\b(?:take\s+)?(\d+(?:\.\d+)?)\s*(tab|tablet|cap|capsule|puff|drop)s?\b", re.I)
_AT_TIME_RE = re.compile(r"\bat\s+(\d{1,2}(?::\d{2})?\s*(?:[ap]\.?m\.?)?)", re.I)
_WEEKDAY_RE = re.compile(r"\b(sun|mon|tue|tues|wed|thu|thur|thurs|fri|sat)(?:day|nesday|rsday|urday|sday)?s?\b", re.I)
_CATEGORY_RE = re.compile(r"\b(morning|noon|afternoon|evening|night|bedtime)\b", re.I)
_PRN_RE = re.compile(r"\b(prn|as needed|if needed|when needed)\b", re.I)

def _frequency(ln_low: str) -> Optional[int]:
    m = _TIMES_PER_RE.search(ln_low)
    if m:
        return int(m.group(1))
    # longest phrase first so "twice daily" beats "daily"
    for phrase in sorted(FREQ_MAP, key=len, reverse=True):
        if re.search(rf"\b{re.escape(phrase)}\b", ln_low):
            return FREQ_MAP[phrase]
    return None

def _phase_from_line(ln: str) -> Dict[str, Any]:
    ln_low = ln.lower()
    phase: Dict[str, Any] = {"isAsNeeded": bool(_PRN_RE.search(ln_low)), "rawText": ln}

    dose = _DOSE_RE.search(ln_low)
    phase["doseAmount"] = float(dose.group(1)) if dose else 1.0
    if dose:
        phase["doseUnit"] = dose.group(2)

    freq = _frequency(ln_low)
    every = _EVERY_N_RE.search(ln_low)
    if every:
        phase["period"] = float(every.group(1))
        if every.group(2):
            phase["periodMax"] = float(every.group(2))
        phase["periodUnit"] = every.group(3)
        freq = freq or 1
    elif _EVERY_OTHER_RE.search(ln_low):
        phase["period"], phase["periodUnit"] = 2.0, "day"
        freq = 1
    elif _WEEKLY_RE.search(ln_low):
        phase["period"], phase["periodUnit"] = 1.0, "week"
        freq = 1
    else:
        m = _TIMES_PER_RE.search(ln_low)
        unit = m.group(2) if m else "day"
        if freq:
            phase["period"], phase["periodUnit"] = 1.0, unit

    if freq:
        phase["frequency"] = freq

    dur = _DURATION_RE.search(ln_low)
    if dur:
        phase["duration"] = float(dur.group(1))
        phase["durationUnit"] = dur.group(2) + "s"

    times = [t for t in (normalize_time(x) for x in _AT_TIME_RE.findall(ln_low)) if t]
    if times:
        phase["specificTimes"] = times

    cats = [c.lower() for c in _CATEGORY_RE.findall(ln_low)]
    if cats:
        phase["timeCategories"] = list(dict.fromkeys(cats))

    days = []
    for w in _WEEKDAY_RE.findall(ln_low):
        d = normalize_weekday(w)
        if d and d not in days:
            days.append(d)
    if days:
        phase["weekdays"] = days

    return phase

def simple_extract_medication_data(text: str) -> MedicationData:
    """
    Only extract lines that look like a medication instruction.
    Prevents parsing normal sentences as med names.
    One phase per line; "then" splits a line into consecutive phases.
    """
    statements: List[MedicationStatement] = []
    if not text:
        return MedicationData(free_text_response=None)

    lines = [ln.strip() for ln in re.split(r"[\n;]", text) if ln.strip()]
    for ln in lines:
        if not (_MED_HINT_RE.search(ln) or _STRENGTH_RE.search(ln)):
            continue

        name_match = _NAME_RE.match(ln)
        if not name_match:
            continue
        name = name_match.group(1).strip()

        strength_match = _STRENGTH_RE.search(ln)
        ln_low = ln.lower()
        has_timing = any((
            _frequency(ln_low),
            _PRN_RE.search(ln_low),
            _EVERY_N_RE.search(ln_low),
            _EVERY_OTHER_RE.search(ln_low),
            _WEEKLY_RE.search(ln_low),
        ))

        # no timing AND no strength => probably not a medicine line
        if not has_timing and not strength_match:
            continue

        segments = [s.strip() for s in re.split(r"\bthen\b", ln, flags=re.I) if s.strip()]
        phases = [_phase_from_line(seg) for seg in segments] if has_timing else []

        stmt = MedicationStatement.model_validate({
            "medication": name,
            "rxnormCode": "unknown",
            "strength": {
                "amount": float(strength_match.group(1)) if strength_match else 0.0,
                "unit": strength_match.group(2).lower() if strength_match else "unknown",
            },
            "sourceText": ln,
            "timingSequence": phases,
        })
        issues = sequence_issues(stmt.timing_sequence)
        if issues:
            logger.info("heuristic timing issues for %s: %s", name, "; ".join(issues))
        statements.append(stmt)

    if not statements:
        reply = "I couldn't find a medicine in that. Could you tell me the name, strength and how often you take it?"
    else:
        reply = "Got it. Are there any other medications you take?"
    return MedicationData(medication_statements=statements, free_text_response=reply)
