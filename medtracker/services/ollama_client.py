# medtracker/services/ollama_client.py
import logging
from typing import Any, Dict, List, Optional

import requests

from medtracker.core.llm_config import (
    OLLAMA_BASE_URL,
    OLLAMA_TEMPERATURE,
    OLLAMA_TIMEOUT_S,
)
from medtracker.services.llm.json_output import parse_json_object

logger = logging.getLogger(__name__)

class OllamaError(RuntimeError):
    pass

def _chat_payload(
    model: str,
    messages: List[Dict[str, str]],
    schema: Optional[Dict[str, Any]],
    temperature: float,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "stream": False,
        "options": {"temperature": temperature},
    }
    # constrained decoding against the schema
    if schema is not None:
        payload["format"] = schema
    return payload

def ollama_chat_json(
    model: str,
    system: str,
    user: str,
    schema: Optional[Dict[str, Any]] = None,
    temperature: Optional[float] = None,
    timeout_s: Optional[int] = None,
) -> Dict[str, Any]:
    """One non-streaming /api/chat call; returns the JSON object in the reply."""
    url = f"{OLLAMA_BASE_URL}/chat"
    payload = _chat_payload(
        model,
        [{"role": "system", "content": system}, {"role": "user", "content": user}],
        schema,
        OLLAMA_TEMPERATURE if temperature is None else temperature,
    )

    logger.debug("ollama chat model=%s url=%s schema=%s", model, url, schema is not None)
    try:
        r = requests.post(url, json=payload, timeout=timeout_s or OLLAMA_TIMEOUT_S)
    except requests.RequestException as e:
        raise OllamaError(f"Ollama request failed: {e}") from e

    if r.status_code >= 400:
        raise OllamaError(f"Ollama {r.status_code}: {r.text[:500]}")

    body = r.json()
    if body.get("done_reason") == "length":
        logger.warning("ollama reply for model=%s hit the token limit; JSON may be cut off", model)

    content = (body.get("message") or {}).get("content") or ""
    try:
        return parse_json_object(content)
    except ValueError as e:
        raise OllamaError(f"Invalid JSON from LLM: {e}") from e
