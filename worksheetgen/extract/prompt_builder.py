"""Assemble the chat-completion request from selected pages and user settings."""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List

from ..config.models import GenerationSettings
from ..errors import EmptySelectionError
from ..ingest.base import PageRecord
from .prompts import JSON_FORMAT_SPEC, SOURCE_HEADER, USER_REQUEST_HEADER

logger = logging.getLogger(__name__)

# Hard cap on source characters sent to the model (provider input limits).
MAX_SOURCE_CHARS = 15000


@dataclass(frozen=True)
class CompletionRequest:
    """A fully assembled request, independent of any HTTP client."""

    model: str
    system_prompt: str
    user_prompt: str
    source_text: str
    temperature: float
    max_tokens: int = 4000
    truncated: bool = False

    @property
    def messages(self) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_prompt},
        ]

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body for ``POST /chat/completions``."""
        return {
            "model": self.model,
            "messages": self.messages,
            "response_format": {"type": "json_object"},
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    @property
    def prompt_hash(self) -> str:
        return hashlib.sha256(
            (self.system_prompt + self.user_prompt).encode()
        ).hexdigest()[:16]


def join_selected_text(pages: Iterable[PageRecord]) -> str:
    """Concatenate the text of included pages, in page order."""
    ordered = sorted(pages, key=lambda p: p.page_number)
    return "\n\n".join(p.text for p in ordered if p.included)


def truncate_source(text: str, limit: int = MAX_SOURCE_CHARS) -> str:
    return text[:limit]


def build_system_prompt(template: str) -> str:
    """User-editable template followed by the fixed JSON output format."""
    return template + JSON_FORMAT_SPEC


def build_user_prompt(source_text: str, user_request: str = "") -> str:
    prompt = SOURCE_HEADER + source_text
    if user_request and user_request.strip():
        prompt += USER_REQUEST_HEADER + user_request.strip() + "\n"
    return prompt


def build_completion_request(
    pages: Iterable[PageRecord],
    settings: GenerationSettings,
    *,
    max_source_chars: int = MAX_SOURCE_CHARS,
) -> CompletionRequest:
    """Build the request for the selected pages.

    Raises
    ------
    EmptySelectionError
        If the included pages contribute no non-blank text.
    """
    selected_text = join_selected_text(pages)
    if not selected_text.strip():
        raise EmptySelectionError()

    source = truncate_source(selected_text, max_source_chars)
    truncated = len(source) < len(selected_text)
    if truncated:
        logger.info(
            "Source text truncated from %d to %d chars", len(selected_text), len(source)
        )

    return CompletionRequest(
        model=settings.model,
        system_prompt=build_system_prompt(settings.system_prompt_template),
        user_prompt=build_user_prompt(source, settings.user_request),
        source_text=source,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        truncated=truncated,
    )
