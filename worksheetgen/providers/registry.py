"""LLM provider factory and model catalog.

Central list of the models offered in the UI and a factory that returns
the provider for a given selection.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import LLMProvider

# ---------------------------------------------------------------------------
# Model catalog: models that support JSON response mode and temperature
# ---------------------------------------------------------------------------

MODEL_CATALOG: List[Dict[str, Any]] = [
    {
        "provider": "openai",
        "model_id": "gpt-4o-mini",
        "label": "GPT-4o mini",
        "tier": "fast",
        "description": "빠르고 저렴함. 기본값",
    },
    {
        "provider": "openai",
        "model_id": "gpt-4o",
        "label": "GPT-4o",
        "tier": "standard",
        "description": "균형형. 긴 자료에 적합",
    },
    {
        "provider": "openai",
        "model_id": "gpt-4.1-mini",
        "label": "GPT-4.1 mini",
        "tier": "fast",
        "description": "긴 문맥을 저렴하게 처리",
    },
    {
        "provider": "openai",
        "model_id": "gpt-4.1",
        "label": "GPT-4.1",
        "tier": "premium",
        "description": "가장 정교한 학습지 구성",
    },
    {
        "provider": "openai",
        "model_id": "gpt-4-turbo",
        "label": "GPT-4 Turbo",
        "tier": "standard",
        "description": "128K 컨텍스트",
    },
]

DEFAULT_MODEL = MODEL_CATALOG[0]["model_id"]


def model_ids() -> List[str]:
    return [m["model_id"] for m in MODEL_CATALOG]


def model_label(model_id: str) -> str:
    """Return ``"GPT-4o mini - 빠르고 저렴함. 기본값"`` or the bare id if unknown."""
    for m in MODEL_CATALOG:
        if m["model_id"] == model_id:
            return f"{m['label']} - {m['description']}"
    return model_id


def create_provider(
    provider: str = "openai",
    *,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> LLMProvider:
    """Instantiate the provider registered under *provider*."""
    if provider == "openai":
        from .openai_provider import DEFAULT_TIMEOUT_SECONDS, OpenAIProvider

        return OpenAIProvider(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout or DEFAULT_TIMEOUT_SECONDS,
        )
    raise ValueError(f"Unknown LLM provider: {provider!r}")
