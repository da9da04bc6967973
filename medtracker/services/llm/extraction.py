# medtracker/services/llm/extraction.py
import logging

from medtracker.core.llm_config import HF_MODEL_EXTRACT, LLM_PROVIDER, OLLAMA_MODEL_EXTRACT
from medtracker.schemas.models import MedicationData
from medtracker.services.hf_client import hf_chat_json
from medtracker.services.llm.extraction_prompt import EXTRACT_SYSTEM_PROMPT
from medtracker.services.llm.extraction_sanitize import sanitize_medication_data
from medtracker.services.llm.extraction_schema import MEDICATION_DATA_SCHEMA
from medtracker.services.ollama_client import ollama_chat_json

logger = logging.getLogger(__name__)

def llm_extract_medication_data(text: str, provider: str | None = None) -> MedicationData:
    user = f"PATIENT_TEXT:\n{text}\n\nExtract medication statements."
    provider = (provider or LLM_PROVIDER).lower()

    if provider == "hf":
        raw = hf_chat_json(
            model=HF_MODEL_EXTRACT,
            system=EXTRACT_SYSTEM_PROMPT,
            user=user,
            schema=MEDICATION_DATA_SCHEMA,
        )
    else:
        raw = ollama_chat_json(
            model=OLLAMA_MODEL_EXTRACT,
            system=EXTRACT_SYSTEM_PROMPT,
            user=user,
            schema=MEDICATION_DATA_SCHEMA,
        )

    data = sanitize_medication_data(raw)
    logger.info("llm extraction via %s: %d statement(s)", provider, len(data.medication_statements))
    return data
