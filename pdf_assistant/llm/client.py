"""
OpenAI chat LLM client.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List

from openai import OpenAI, OpenAIError

from pdf_assistant.config import openai_api_key, settings
from pdf_assistant.errors import LLMError

DEFAULT_LLM_MODEL = settings.llm_model_name
DEFAULT_TEMPERATURE = 0.0


class LLMClient:
    def __init__(
        self,
        model: str = DEFAULT_LLM_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        client: OpenAI | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.client = client or OpenAI(api_key=openai_api_key())

    def chat(self, messages: List[Dict[str, Any]]) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=messages,
            )
        except OpenAIError as exc:
            raise LLMError(f"Chat completion failed: {exc}") from exc

        if not response.choices:
            raise LLMError("Chat completion returned no choices")
        return response.choices[0].message.content or ""

    def stream_chat(self, messages: List[Dict[str, Any]]) -> Iterator[str]:
        """
        Yield text fragments of a streaming completion as they arrive.

        The upstream stream is closed when this iterator is exhausted or closed early.
        """
        try:
            stream = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=messages,
                stream=True,
            )
        except OpenAIError as exc:
            raise LLMError(f"Streaming completion failed: {exc}") from exc

        with stream:
            try:
                for event in stream:
                    if not event.choices:
                        continue
                    fragment = event.choices[0].delta.content
                    if fragment:
                        yield fragment
            except OpenAIError as exc:
                raise LLMError(f"Streaming completion interrupted: {exc}") from exc

    def close(self) -> None:
        self.client.close()


__all__ = ["LLMClient", "DEFAULT_LLM_MODEL", "DEFAULT_TEMPERATURE"]
