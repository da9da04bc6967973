# medtracker/services/hf_client.py
import logging
import os
from typing import Any, Dict, Optional

from huggingface_hub import InferenceClient

from medtracker.core.llm_config import (
    HF_MAX_TOKENS,
    HF_TEMPERATURE,
    HF_TIMEOUT_S,
)
from medtracker.services.llm.json_output import parse_json_object

logger = logging.getLogger(__name__)

class HFLLMError(RuntimeError):
    pass

def _response_format(schema: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    if not schema:
        return {"type": "json_object"}
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "schema": schema, "strict": True},
    }

def _client(timeout_s: Optional[int]) -> InferenceClient:
    # token and provider are read per call so config.env edits apply without re-import
    token = os.getenv("HF_TOKEN", "").strip()
    if not token:
        raise HFLLMError("HF_TOKEN is missing. Set it in config.env and restart.")
    provider = os.getenv("HF_PROVIDER", "auto").strip() or "auto"
    logger.debug("hf inference provider=%s", provider)
    return InferenceClient(provider=provider, api_key=token, timeout=float(timeout_s or HF_TIMEOUT_S))

def hf_chat_json(
    *,
    model: str,
    system: str,
    user: str,
    schema: Optional[Dict[str, Any]] = None,
    schema_name: str = "MedicationData",
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    timeout_s: Optional[int] = None,
) -> Dict[str, Any]:
    client = _client(timeout_s)
    try:
        out = client.chat_completion(
            model=model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=HF_TEMPERATURE if temperature is None else temperature,
            max_tokens=HF_MAX_TOKENS if max_tokens is None else max_tokens,
            response_format=_response_format(schema, schema_name),
        )
    except Exception as e:
        raise HFLLMError(f"HF inference failed: {e}") from e

    if not out.choices:
        raise HFLLMError(f"HF inference returned no choices for model {model}")

    choice = out.choices[0]
    if getattr(choice, "finish_reason", None) == "length":
        logger.warning("hf reply for model=%s hit max_tokens=%s; JSON may be cut off", model, max_tokens or HF_MAX_TOKENS)

    try:
        return parse_json_object(choice.message.content or "")
    except ValueError as e:
        raise HFLLMError(f"Model did not return valid JSON: {e}") from e
