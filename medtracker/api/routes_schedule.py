# medtracker/api/routes_schedule.py
from fastapi import APIRouter

from medtracker.schemas.models import (
    CalendarDayOut,
    CalendarRequest,
    CalendarResponse,
    DayDose,
    ProjectRequest,
    ProjectResponse,
    ValidateRequest,
    ValidateResponse,
)
from medtracker.schemas.timing import is_well_formed, sequence_issues
from medtracker.services.month_view import project_month
from medtracker.services.schedule import project

router = APIRouter(prefix="/schedule", tags=["schedule"])

@router.post("/project", response_model=ProjectResponse, response_model_by_alias=True)
def project_dose(req: ProjectRequest):
    return ProjectResponse(occurrence=project(req.medication, req.date, req.regimen_start))

@router.post("/calendar", response_model=CalendarResponse, response_model_by_alias=True)
def calendar(req: CalendarRequest):
    days = [
        CalendarDayOut(
            date=d.day.date,
            is_current_month=d.day.is_current_month,
            doses=[DayDose(medication=name, occurrence=occ) for name, occ in d.doses],
        )
        for d in project_month(req.medications, req.year, req.month, req.regimen_start)
    ]
    return CalendarResponse(year=req.year, month=req.month, regimen_start=req.regimen_start, days=days)

@router.post("/validate", response_model=ValidateResponse, response_model_by_alias=True)
def validate(req: ValidateRequest):
    return ValidateResponse(
        well_formed=[is_well_formed(p) for p in req.timing_sequence],
        issues=sequence_issues(req.timing_sequence),
    )
