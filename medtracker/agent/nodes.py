# medtracker/agent/nodes.py
import logging
from typing import Any, Dict

from medtracker.agent.state import ChatState
from medtracker.core.llm_config import USE_HEURISTIC_FALLBACK, USE_LLM_EXTRACTION
from medtracker.schemas.models import GENERIC_FAILURE_MESSAGE, MedicationData
from medtracker.services.extraction import simple_extract_medication_data
from medtracker.services.llm.extraction import llm_extract_medication_data
from medtracker.services.session_store import merge_medication_data

logger = logging.getLogger(__name__)

def _audit(state: ChatState, event: str, extra: Dict[str, Any] | None = None) -> Dict[str, Any]:
    audit = list(state.get("audit") or [])
    audit.append({"event": event, **(extra or {})})
    return {"audit": audit}

def _dump(data: MedicationData) -> Dict[str, Any]:
    return data.model_dump(by_alias=True, exclude_none=True)

def extract_node(state: ChatState) -> Dict[str, Any]:
    text = (state.get("input_text") or "").strip()
    turn = {"messages": [{"role": "user", "text": text}]}

    if not text:
        return {**turn, "extracted": None, "ok": False, "error": "empty input",
                **_audit(state, "extract.skip", {"reason": "empty input"})}

    if USE_LLM_EXTRACTION:
        try:
            data = llm_extract_medication_data(text)
            return {**turn, "extracted": _dump(data), "ok": True, "error": None,
                    **_audit(state, "extract.llm.done", {"count": len(data.medication_statements)})}
        except Exception as e:
            logger.warning("llm extraction failed: %s", e)
            if not USE_HEURISTIC_FALLBACK:
                return {**turn, "extracted": None, "ok": False, "error": str(e),
                        **_audit(state, "extract.llm.failed", {"error": str(e)})}
            data = simple_extract_medication_data(text)
            return {**turn, "extracted": _dump(data), "ok": True, "error": None,
                    **_audit(state, "extract.fallback.done",
                             {"count": len(data.medication_statements), "error": str(e)})}

    data = simple_extract_medication_data(text)
    return {**turn, "extracted": _dump(data), "ok": True, "error": None,
            **_audit(state, "extract.heuristic.done", {"count": len(data.medication_statements)})}

def merge_node(state: ChatState) -> Dict[str, Any]:
    current_raw = state.get("medication_data")
    current = MedicationData.model_validate(current_raw) if current_raw else None

    extracted = state.get("extracted")
    if not state.get("ok") or extracted is None:
        # failed turn leaves the tracked list untouched
        kept = current or MedicationData()
        return {"medication_data": _dump(kept), **_audit(state, "merge.skip")}

    merged = merge_medication_data(current, MedicationData.model_validate(extracted))
    return {
        "medication_data": _dump(merged),
        **_audit(state, "merge.done", {"count": len(merged.medication_statements)}),
    }

def respond_node(state: ChatState) -> Dict[str, Any]:
    if not state.get("ok"):
        reply = GENERIC_FAILURE_MESSAGE
    else:
        reply = ((state.get("extracted") or {}).get("freeTextResponse")
                 or "Got it. Are there any other medications you take?")
    return {
        "reply": reply,
        "messages": [{"role": "assistant", "text": reply}],
        **_audit(state, "respond.done", {"ok": bool(state.get("ok"))}),
    }
