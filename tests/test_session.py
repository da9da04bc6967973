"""
Tests for session memory: merging extraction turns and the chat-turn graph.
"""
import uuid

import pytest

from medtracker.agent import nodes
from medtracker.agent.graph import chat_graph
from medtracker.schemas.models import GENERIC_FAILURE_MESSAGE, MedicationData
from medtracker.services.ollama_client import OllamaError
from medtracker.services.session_store import merge_medication_data


def _data(*names_and_amounts, reply=None) -> MedicationData:
    return MedicationData.model_validate({
        "medicationStatements": [
            {
                "medication": name,
                "strength": {"amount": amount, "unit": "mg"},
                "timingSequence": [{"isAsNeeded": False, "doseAmount": 1, "frequency": 1}],
            }
            for name, amount in names_and_amounts
        ],
        "freeTextResponse": reply,
    })


class TestMerge:

    def test_merge_into_empty(self):
        merged = merge_medication_data(None, _data(("aspirin", 81), reply="more?"))
        assert [s.medication for s in merged.medication_statements] == ["aspirin"]
        assert merged.free_text_response == "more?"

    def test_same_name_replaced_order_kept(self):
        current = _data(("aspirin", 81), ("metformin", 500))
        incoming = _data(("Metformin", 1000), ("lisinopril", 10))
        merged = merge_medication_data(current, incoming)

        assert [s.strength.amount for s in merged.medication_statements] == [81, 1000, 10]
        # inputs untouched
        assert [s.strength.amount for s in current.medication_statements] == [81, 500]
        assert merged is not current


def _session() -> dict:
    return {"configurable": {"thread_id": "test_" + uuid.uuid4().hex}}


def _turn(config, text):
    return chat_graph.invoke({"session_id": config["configurable"]["thread_id"], "input_text": text}, config=config)


class TestChatGraph:

    @pytest.fixture(autouse=True)
    def llm_on(self, monkeypatch):
        monkeypatch.setattr(nodes, "USE_LLM_EXTRACTION", True)
        monkeypatch.setattr(nodes, "USE_HEURISTIC_FALLBACK", True)

    def test_turns_accumulate(self, monkeypatch):
        replies = iter([
            _data(("aspirin", 81), reply="Anything else?"),
            _data(("metformin", 500), reply="Got it."),
        ])
        monkeypatch.setattr(nodes, "llm_extract_medication_data", lambda text: next(replies))
        config = _session()

        first = _turn(config, "aspirin 81mg daily")
        assert first["ok"] is True
        assert first["reply"] == "Anything else?"

        second = _turn(config, "metformin 500mg")
        names = [s["medication"] for s in second["medication_data"]["medicationStatements"]]
        assert names == ["aspirin", "metformin"]
        assert [m["role"] for m in second["messages"]] == ["user", "assistant", "user", "assistant"]
        events = [a["event"] for a in second["audit"]]
        assert events.count("extract.llm.done") == 2

    def test_llm_failure_falls_back_to_heuristic(self, monkeypatch):
        def boom(text):
            raise OllamaError("connection refused")

        monkeypatch.setattr(nodes, "llm_extract_medication_data", boom)
        result = _turn(_session(), "Amlodipine 5mg once daily")

        assert result["ok"] is True
        assert result["medication_data"]["medicationStatements"][0]["medication"] == "Amlodipine"
        assert result["audit"][0]["event"] == "extract.fallback.done"

    def test_llm_failure_without_fallback_keeps_list(self, monkeypatch):
        config = _session()
        monkeypatch.setattr(nodes, "llm_extract_medication_data", lambda text: _data(("aspirin", 81)))
        _turn(config, "aspirin")

        def boom(text):
            raise OllamaError("timeout")

        monkeypatch.setattr(nodes, "llm_extract_medication_data", boom)
        monkeypatch.setattr(nodes, "USE_HEURISTIC_FALLBACK", False)
        result = _turn(config, "metformin 500mg twice daily")

        assert result["ok"] is False
        assert result["reply"] == GENERIC_FAILURE_MESSAGE
        names = [s["medication"] for s in result["medication_data"]["medicationStatements"]]
        assert names == ["aspirin"]

    def test_heuristic_only(self, monkeypatch):
        monkeypatch.setattr(nodes, "USE_LLM_EXTRACTION", False)
        result = _turn(_session(), "Ibuprofen 200mg as needed")
        assert result["audit"][0]["event"] == "extract.heuristic.done"
        assert result["medication_data"]["medicationStatements"][0]["timingSequence"][0]["isAsNeeded"] is True

    def test_empty_input(self):
        result = _turn(_session(), "   ")
        assert result["ok"] is False
        assert result["reply"] == GENERIC_FAILURE_MESSAGE
        assert result["medication_data"] == {"medicationStatements": []}
