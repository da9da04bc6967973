from fastapi import FastAPI

from medtracker.core.logging_config import configure_logging
from medtracker.api.routes_tracker import router as tracker_router
from medtracker.api.routes_schedule import router as schedule_router

configure_logging()

app = FastAPI(title="Medication Tracker", version="1.0")

app.include_router(tracker_router)
app.include_router(schedule_router)

@app.get("/health")
def health():
    return {"ok": True}

@app.get("/")
def root():
    return {"ok": True, "service": "Medication Tracker"}
