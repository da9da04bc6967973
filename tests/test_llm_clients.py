"""
Tests for the LLM JSON transports. No network: requests / InferenceClient are faked.
"""
from types import SimpleNamespace

import pytest
import requests

from medtracker.services import hf_client, ollama_client
from medtracker.services.hf_client import HFLLMError, hf_chat_json
from medtracker.services.llm.json_output import parse_json_object
from medtracker.services.ollama_client import OllamaError, ollama_chat_json


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


class TestOllama:

    def test_parses_wrapped_json(self, monkeypatch):
        sent = {}

        def fake_post(url, json, timeout):
            sent.update(url=url, json=json)
            return FakeResponse(payload={"message": {"content": 'Sure! {"medicationStatements": []} hope that helps'}})

        monkeypatch.setattr(ollama_client.requests, "post", fake_post)
        out = ollama_chat_json(model="m", system="s", user="u", schema={"type": "object"})

        assert out == {"medicationStatements": []}
        assert sent["url"].endswith("/chat")
        assert sent["json"]["format"] == {"type": "object"}
        assert sent["json"]["stream"] is False

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(ollama_client.requests, "post", lambda *a, **k: FakeResponse(500, text="boom"))
        with pytest.raises(OllamaError, match="500"):
            ollama_chat_json(model="m", system="s", user="u")

    def test_connection_error(self, monkeypatch):
        def fake_post(*a, **k):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(ollama_client.requests, "post", fake_post)
        with pytest.raises(OllamaError, match="request failed"):
            ollama_chat_json(model="m", system="s", user="u")

    def test_invalid_json(self, monkeypatch):
        monkeypatch.setattr(
            ollama_client.requests, "post",
            lambda *a, **k: FakeResponse(payload={"message": {"content": "no json here"}}),
        )
        with pytest.raises(OllamaError, match="Invalid JSON"):
            ollama_chat_json(model="m", system="s", user="u")


class TestHF:

    def test_missing_token(self, monkeypatch):
        monkeypatch.delenv("HF_TOKEN", raising=False)
        with pytest.raises(HFLLMError, match="HF_TOKEN"):
            hf_chat_json(model="m", system="s", user="u")

    def test_schema_response_format(self, monkeypatch):
        seen = {}

        class FakeClient:
            def __init__(self, **kwargs):
                seen["init"] = kwargs

            def chat_completion(self, **kwargs):
                seen["call"] = kwargs
                msg = SimpleNamespace(content='{"medicationStatements": [], "freeTextResponse": "hi"}')
                return SimpleNamespace(choices=[SimpleNamespace(message=msg)])

        monkeypatch.setenv("HF_TOKEN", "tok")
        monkeypatch.setattr(hf_client, "InferenceClient", FakeClient)
        out = hf_chat_json(model="m", system="s", user="u", schema={"type": "object"})

        assert out["freeTextResponse"] == "hi"
        assert seen["init"]["api_key"] == "tok"
        assert seen["call"]["response_format"]["type"] == "json_schema"
        assert seen["call"]["response_format"]["json_schema"]["schema"] == {"type": "object"}


class TestParseJsonObject:

    @pytest.mark.parametrize("text", [
        '{"a": 1}',
        '```json\n{"a": 1}\n```',
        'Here you go: {"a": 1} and {"b": 2}',
        '[1, 2] then {"a": 1}',
        '{broken {"a": 1}',
    ])
    def test_first_object(self, text):
        assert parse_json_object(text) == {"a": 1}

    def test_nested_braces_in_strings(self):
        assert parse_json_object('x {"note": "take {1} tab"} y') == {"note": "take {1} tab"}

    @pytest.mark.parametrize("text", ["", None, "[1, 2]", "{not json}"])
    def test_no_object(self, text):
        with pytest.raises(ValueError):
            parse_json_object(text)


class TestHFResponses:

    @pytest.fixture(autouse=True)
    def token(self, monkeypatch):
        monkeypatch.setenv("HF_TOKEN", "tok")

    def _client_returning(self, monkeypatch, choices):
        class FakeClient:
            def __init__(self, **kwargs):
                pass

            def chat_completion(self, **kwargs):
                return SimpleNamespace(choices=choices)

        monkeypatch.setattr(hf_client, "InferenceClient", FakeClient)

    def test_no_choices(self, monkeypatch):
        self._client_returning(monkeypatch, [])
        with pytest.raises(HFLLMError, match="no choices"):
            hf_chat_json(model="m", system="s", user="u")

    def test_invalid_json(self, monkeypatch):
        msg = SimpleNamespace(content="I cannot help with that")
        self._client_returning(monkeypatch, [SimpleNamespace(message=msg, finish_reason="stop")])
        with pytest.raises(HFLLMError, match="valid JSON"):
            hf_chat_json(model="m", system="s", user="u")

    def test_plain_json_object_format_without_schema(self, monkeypatch):
        seen = {}

        class FakeClient:
            def __init__(self, **kwargs):
                pass

            def chat_completion(self, **kwargs):
                seen.update(kwargs)
                msg = SimpleNamespace(content='{"ok": true}')
                return SimpleNamespace(choices=[SimpleNamespace(message=msg, finish_reason="length")])

        monkeypatch.setattr(hf_client, "InferenceClient", FakeClient)
        assert hf_chat_json(model="m", system="s", user="u") == {"ok": True}
        assert seen["response_format"] == {"type": "json_object"}
