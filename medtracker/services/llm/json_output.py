# medtracker/services/llm/json_output.py
import json
from typing import Any, Dict

_decoder = json.JSONDecoder()

def parse_json_object(text: str) -> Dict[str, Any]:
    """
    First JSON object in a model reply. Models sometimes add chatter or a code
    fence around the object; anything before or after it is ignored.
    Raises ValueError when no object can be decoded.
    """
    text = (text or "").strip()
    pos = text.find("{")
    while pos != -1:
        try:
            obj, _ = _decoder.raw_decode(text, pos)
        except json.JSONDecodeError:
            pos = text.find("{", pos + 1)
            continue
        if isinstance(obj, dict):
            return obj
        pos = text.find("{", pos + 1)
    raise ValueError(f"no JSON object in model output: {text[:200]}")
