"""Output guard for LLM responses.

JSON mode already guarantees a JSON document; the guard only turns a
malformed or non-object body into :class:`LLMJSONError`.  No repair is
attempted.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict

from .base import LLMJSONError

logger = logging.getLogger(__name__)


class JSONOutputGuard:
    """Ensure LLM output is a JSON object."""

    @staticmethod
    def enforce(raw_text: str, provider: str = "") -> Dict[str, Any]:
        try:
            parsed = json.loads(raw_text)
        except (TypeError, json.JSONDecodeError) as exc:
            logger.warning("Model returned invalid JSON (%d chars): %s", len(raw_text or ""), exc)
            raise LLMJSONError(
                f"AI 응답을 JSON으로 해석할 수 없습니다: {exc}",
                raw_text=raw_text or "",
                provider=provider,
            ) from exc

        if not isinstance(parsed, dict):
            raise LLMJSONError(
                f"AI 응답이 JSON 객체가 아닙니다 ({type(parsed).__name__})",
                raw_text=raw_text,
                provider=provider,
            )
        return parsed
