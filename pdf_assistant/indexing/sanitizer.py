"""
PII redaction of chunk text before it is embedded and stored.
"""

from __future__ import annotations

import logging

from pdf_assistant.errors import LLMError, SanitizationError
from pdf_assistant.llm.client import LLMClient

logger = logging.getLogger(__name__)

SANITIZER_SYSTEM_PROMPT = (
    "You are a PII sanitization agent. Redact Personally Identifiable Information from the text: "
    "email addresses, phone numbers and API keys or other secret tokens. "
    "Replace each with [REDACTED EMAIL], [REDACTED PHONE] or [REDACTED KEY] respectively. "
    "Leave everything else exactly as written. "
    "Return ONLY the sanitized text with no conversational filler."
)


class PIISanitizer:
    def __init__(self, llm_client: LLMClient) -> None:
        self.llm_client = llm_client

    def sanitize(self, text: str) -> str:
        messages = [
            {"role": "system", "content": SANITIZER_SYSTEM_PROMPT},
            {"role": "user", "content": f"Text to sanitize:\n{text}"},
        ]
        try:
            sanitized = self.llm_client.chat(messages)
        except LLMError as exc:
            raise SanitizationError(f"Sanitization failed: {exc.message}") from exc

        sanitized = sanitized.strip()
        # An empty reply must not fall back to the raw text.
        if not sanitized:
            raise SanitizationError("Sanitization returned no text")
        return sanitized

    def close(self) -> None:
        self.llm_client.close()


__all__ = ["PIISanitizer", "SANITIZER_SYSTEM_PROMPT"]
