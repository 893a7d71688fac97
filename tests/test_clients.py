"""
Tests for the OpenAI-backed clients with the SDK mocked out.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from pdf_assistant.embeddings.client import EmbeddingsClient
from pdf_assistant.errors import EmbeddingError, LLMError, SanitizationError
from pdf_assistant.indexing.sanitizer import PIISanitizer
from pdf_assistant.llm.client import LLMClient


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _delta(content):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class FakeStream:
    def __init__(self, events, error=None):
        self.events = events
        self.error = error
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True

    def __iter__(self):
        yield from self.events
        if self.error:
            raise self.error


class TestEmbeddingsClient:
    def test_embed_text(self):
        openai_client = MagicMock()
        openai_client.embeddings.create.return_value = SimpleNamespace(data=[SimpleNamespace(embedding=[0.1, 0.2])])

        client = EmbeddingsClient(model="emb-model", dimensions=2, client=openai_client)

        assert client.embed_text("hello") == [0.1, 0.2]
        openai_client.embeddings.create.assert_called_once_with(model="emb-model", input=["hello"], dimensions=2)

    def test_empty_vector_is_an_error(self):
        openai_client = MagicMock()
        openai_client.embeddings.create.return_value = SimpleNamespace(data=[SimpleNamespace(embedding=[])])

        with pytest.raises(EmbeddingError):
            EmbeddingsClient(client=openai_client).embed_text("hello")

    def test_transport_error_is_wrapped(self):
        openai_client = MagicMock()
        openai_client.embeddings.create.side_effect = OpenAIError("timeout")

        with pytest.raises(EmbeddingError, match="timeout"):
            EmbeddingsClient(client=openai_client).embed_text("hello")

    def test_missing_data_is_an_error(self):
        openai_client = MagicMock()
        openai_client.embeddings.create.return_value = SimpleNamespace(data=[])

        with pytest.raises(EmbeddingError):
            EmbeddingsClient(client=openai_client).embed_text("hello")


class TestLLMClient:
    def test_chat_uses_configured_temperature(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = _completion("answer")

        client = LLMClient(model="m", temperature=0.2, client=openai_client)

        assert client.chat([{"role": "user", "content": "hi"}]) == "answer"
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.2
        assert kwargs["model"] == "m"

    def test_chat_without_choices_raises_llm_error(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = SimpleNamespace(choices=[])

        with pytest.raises(LLMError, match="no choices"):
            LLMClient(client=openai_client).chat([{"role": "user", "content": "hi"}])

    def test_stream_chat_yields_non_empty_deltas(self):
        stream = FakeStream([_delta("Hel"), _delta(None), SimpleNamespace(choices=[]), _delta("lo")])
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = stream

        fragments = list(LLMClient(client=openai_client).stream_chat([]))

        assert fragments == ["Hel", "lo"]
        assert stream.closed
        assert openai_client.chat.completions.create.call_args.kwargs["stream"] is True

    def test_stream_interruption_raises_llm_error(self):
        stream = FakeStream([_delta("Hel")], error=OpenAIError("reset"))
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = stream

        fragments = LLMClient(client=openai_client).stream_chat([])

        assert next(fragments) == "Hel"
        with pytest.raises(LLMError, match="reset"):
            next(fragments)
        assert stream.closed

    def test_stream_open_failure_raises_llm_error(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create.side_effect = OpenAIError("unauthorized")

        with pytest.raises(LLMError):
            list(LLMClient(client=openai_client).stream_chat([]))


class TestPIISanitizer:
    def test_returns_model_output_at_temperature_zero(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = _completion(" call [REDACTED PHONE] \n")
        sanitizer = PIISanitizer(LLMClient(temperature=0.0, client=openai_client))

        assert sanitizer.sanitize("call 555-0100") == "call [REDACTED PHONE]"
        kwargs = openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.0
        assert "call 555-0100" in kwargs["messages"][-1]["content"]
        assert "[REDACTED EMAIL]" in kwargs["messages"][0]["content"]

    def test_model_failure_raises_sanitization_error(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create.side_effect = OpenAIError("boom")

        with pytest.raises(SanitizationError):
            PIISanitizer(LLMClient(client=openai_client)).sanitize("secret sk-123")

    def test_empty_reply_is_not_replaced_by_raw_text(self):
        openai_client = MagicMock()
        openai_client.chat.completions.create.return_value = _completion(None)

        with pytest.raises(SanitizationError):
            PIISanitizer(LLMClient(client=openai_client)).sanitize("secret sk-123")
