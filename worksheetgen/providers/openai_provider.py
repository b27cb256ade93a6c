"""OpenAI chat-completion provider.

One ``POST /chat/completions`` per call, bearer-token auth handled by the
SDK, JSON response mode, and no automatic retries.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Optional

import openai
from openai import OpenAI

from ..errors import MissingAPIKeyError
from .base import GENERIC_API_ERROR, LLMError, LLMProvider, LLMResponse
from .guards import JSONOutputGuard

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120.0


def provider_error_message(body: Any) -> str:
    """Return ``error.message`` from an API error body, or the generic text.

    The SDK may hand over either the full body ``{"error": {...}}`` or the
    inner ``error`` object, so both shapes are accepted.
    """
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict):
            message = inner.get("message")
            if isinstance(message, str) and message.strip():
                return message
    return GENERIC_API_ERROR


class OpenAIProvider(LLMProvider):
    """LLM provider backed by the OpenAI API (or any compatible endpoint).

    Parameters
    ----------
    api_key : str, optional
        Bearer token.  Falls back to ``OPENAI_API_KEY`` when omitted.
    base_url : str, optional
        Alternative endpoint for OpenAI-compatible servers.
    timeout : float
        Request timeout in seconds.
    http_client : httpx.Client, optional
        Passed through to the SDK (proxies, tests).
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: Any = None,
    ):
        if api_key is None:
            api_key = os.environ.get("OPENAI_API_KEY", "")
        self.api_key = api_key.strip()
        self.base_url = base_url or None
        self.timeout = timeout
        self.http_client = http_client
        self._client: Optional[OpenAI] = None

    def check_credentials(self) -> None:
        if not self.api_key:
            raise MissingAPIKeyError()

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self.check_credentials()
            kwargs: dict = {
                "api_key": self.api_key,
                "timeout": self.timeout,
                "max_retries": 0,
            }
            if self.base_url:
                kwargs["base_url"] = self.base_url
            if self.http_client is not None:
                kwargs["http_client"] = self.http_client
            self._client = OpenAI(**kwargs)
        return self._client

    def complete(self, request) -> LLMResponse:
        client = self.client
        logger.info(
            "Requesting completion: model=%s temperature=%.1f prompt=%s",
            request.model, request.temperature, request.prompt_hash,
        )

        t0 = time.time()
        try:
            response = client.chat.completions.create(**request.to_payload())
        except openai.APIStatusError as exc:
            message = provider_error_message(exc.body)
            logger.error("OpenAI API returned %s: %s", exc.status_code, message)
            raise LLMError(message, provider=self.provider_name, status_code=exc.status_code) from exc
        except openai.APIError as exc:
            logger.error("OpenAI API request failed: %s", exc)
            raise LLMError(f"{GENERIC_API_ERROR}: {exc}", provider=self.provider_name) from exc
        latency_ms = int((time.time() - t0) * 1000)

        if not response.choices:
            raise LLMError(GENERIC_API_ERROR, provider=self.provider_name)

        choice = response.choices[0]
        raw_text = choice.message.content or ""
        usage = response.usage
        logger.info(
            "Completion received in %d ms (%d chars, finish=%s)",
            latency_ms, len(raw_text), choice.finish_reason,
        )

        return LLMResponse(
            raw_text=raw_text,
            parsed_json=JSONOutputGuard.enforce(raw_text, provider=self.provider_name),
            model=response.model or request.model,
            provider=self.provider_name,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            latency_ms=latency_ms,
            finish_reason=choice.finish_reason or "",
        )
