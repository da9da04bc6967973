# medtracker/api/routes_tracker.py
import logging
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException

from medtracker.agent.graph import chat_graph
from medtracker.schemas.models import ChatTurnRequest, ChatTurnResponse, MedicationData
from medtracker.services.summary import medication_card

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tracker", tags=["tracker"])

def _config(session_id: str):
    return {"configurable": {"thread_id": session_id}}

def _session_values(session_id: str) -> Dict[str, Any]:
    snap = chat_graph.get_state(_config(session_id))
    return snap.values or {}

def _session_data(session_id: str) -> MedicationData:
    raw = _session_values(session_id).get("medication_data")
    return MedicationData.model_validate(raw) if raw else MedicationData()

@router.post("/messages", response_model=ChatTurnResponse, response_model_by_alias=True)
def post_message(req: ChatTurnRequest):
    result = chat_graph.invoke(
        {"session_id": req.session_id, "input_text": req.text},
        config=_config(req.session_id),
    )
    data = MedicationData.model_validate(result.get("medication_data") or {})
    ok = bool(result.get("ok"))
    if not ok:
        logger.info("chat turn failed for session %s: %s", req.session_id, result.get("error"))

    return ChatTurnResponse(
        session_id=req.session_id,
        ok=ok,
        reply=result.get("reply") or "",
        medication_data=data,
    )

@router.get("/medications", response_model=MedicationData, response_model_by_alias=True)
def get_medications(session_id: str):
    return _session_data(session_id)

@router.get("/cards")
def get_cards(session_id: str) -> List[Dict[str, Any]]:
    return [medication_card(m) for m in _session_data(session_id).medication_statements]

@router.get("/audit")
def get_audit(session_id: str):
    values = _session_values(session_id)
    if not values:
        raise HTTPException(status_code=404, detail="session_id not found")
    return {
        "sessionId": session_id,
        "audit": values.get("audit", []),
        "messages": values.get("messages", []),
    }
