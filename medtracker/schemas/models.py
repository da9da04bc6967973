import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

OccurrenceSource = Literal["explicit", "calculated"]

GENERIC_FAILURE_MESSAGE = "Sorry, I couldn't process that. Please try again."


class WireModel(BaseModel):
    """
    Wire contract with the extraction service and the UI uses camelCase keys.
    Python code uses snake_case; both are accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Strength(WireModel):
    amount: float
    unit: str


class TimingPhase(WireModel):
    order_in_sequence: Optional[float] = None

    dose_amount: float
    dose_unit: Optional[str] = None

    frequency: Optional[int] = Field(default=None, description="Doses per period")
    frequency_max: Optional[int] = None

    period: Optional[float] = None
    period_max: Optional[float] = None
    period_unit: Optional[str] = Field(default=None, description="hour, day, week, month")

    # absent duration => open-ended phase, must be last
    duration: Optional[float] = None
    duration_unit: Optional[str] = None

    count: Optional[float] = None
    is_as_needed: bool

    specific_times: Optional[List[str]] = Field(default=None, description="HH:MM 24-hour")
    time_categories: Optional[List[str]] = None
    weekdays: Optional[List[str]] = Field(default=None, description="lowercase weekday names")

    raw_text: Optional[str] = None


class MedicationStatement(WireModel):
    medication: str
    brand_name: Optional[str] = None
    generic_name: Optional[str] = None
    rxnorm_code: str = "unknown"
    form: Optional[str] = None
    strength: Strength
    source_text: str = ""
    # insertion order = regimen chronology; empty means timing unknown
    timing_sequence: List[TimingPhase] = Field(default_factory=list)


class MedicationData(WireModel):
    medication_statements: List[MedicationStatement] = Field(default_factory=list)
    free_text_response: Optional[str] = None


class AsNeededOccurrence(WireModel):
    as_needed: Literal[True] = True
    max: float
    dose_amount: float
    dose_unit: Optional[str] = None


class ScheduledOccurrence(WireModel):
    as_needed: Literal[False] = False
    times: List[str]
    dose_amount: float
    dose_unit: Optional[str] = None
    source: OccurrenceSource

    # display only
    explicit_weekdays: Optional[List[str]] = None
    time_categories: Optional[List[str]] = None


DoseOccurrence = Union[AsNeededOccurrence, ScheduledOccurrence]


# ---------------------------
# API models
# ---------------------------

class ChatTurnRequest(WireModel):
    session_id: str
    text: str


class ChatTurnResponse(WireModel):
    session_id: str
    ok: bool
    reply: str
    medication_data: MedicationData


class ProjectRequest(WireModel):
    medication: MedicationStatement
    date: datetime.date
    regimen_start: datetime.date


class ProjectResponse(WireModel):
    occurrence: Optional[DoseOccurrence] = None


class CalendarRequest(WireModel):
    medications: List[MedicationStatement] = Field(default_factory=list)
    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)
    regimen_start: datetime.date


class DayDose(WireModel):
    medication: str
    occurrence: DoseOccurrence


class CalendarDayOut(WireModel):
    date: datetime.date
    is_current_month: bool
    doses: List[DayDose] = Field(default_factory=list)


class CalendarResponse(WireModel):
    year: int
    month: int
    regimen_start: datetime.date
    days: List[CalendarDayOut]


class ValidateRequest(WireModel):
    timing_sequence: List[Dict[str, Any]] = Field(default_factory=list)


class ValidateResponse(WireModel):
    well_formed: List[bool]
    issues: List[str]
