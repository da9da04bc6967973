import operator
from typing import Annotated, Any, Dict, List, Optional, TypedDict

class ChatState(TypedDict, total=False):
    # session_id doubles as LangGraph thread_id
    session_id: str

    # inputs
    input_text: str
    messages: Annotated[List[Dict[str, str]], operator.add]  # {"role", "text"}

    # per-turn
    extracted: Optional[Dict[str, Any]]   # MedicationData (camelCase dict) from this turn
    ok: bool
    error: Optional[str]

    # outputs
    medication_data: Dict[str, Any]       # merged MedicationData for the session
    reply: str
    audit: List[Dict[str, Any]]
