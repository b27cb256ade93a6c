"""LLM provider interface: abstract base for completion backends.

The session controller calls providers via dependency injection, so tests
and the CLI can swap in any implementation of ``complete``.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from ..extract.prompt_builder import CompletionRequest

GENERIC_API_ERROR = "API 호출 실패"


@dataclass
class LLMResponse:
    """Standardised response from any LLM provider."""

    raw_text: str
    parsed_json: Dict[str, Any]
    model: str = ""
    provider: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: int = 0
    finish_reason: str = ""


class LLMProvider(abc.ABC):
    """Abstract base class for LLM providers."""

    provider_name: str = "base"

    @abc.abstractmethod
    def check_credentials(self) -> None:
        """Raise :class:`~worksheetgen.errors.MissingAPIKeyError` if unusable.

        Called before any network activity so that a missing key is
        reported as an input problem, not an API failure.
        """

    @abc.abstractmethod
    def complete(self, request: "CompletionRequest") -> LLMResponse:
        """Send *request* once and return the parsed JSON response.

        Raises
        ------
        LLMError
            On a non-success status or a transport failure.
        LLMJSONError
            If the message content is not a JSON object.
        """


class LLMError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(self, message: str, provider: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class LLMJSONError(LLMError):
    """The model's message content could not be parsed as a JSON object."""

    def __init__(self, message: str, raw_text: str = "", provider: str = ""):
        super().__init__(message, provider=provider)
        self.raw_text = raw_text
