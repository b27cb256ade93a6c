"""LLM provider layer.

A provider turns a :class:`~worksheetgen.extract.prompt_builder.CompletionRequest`
into a parsed JSON dict.  Only an OpenAI-compatible chat-completion
backend is shipped; ``registry.create_provider`` is the single place that
knows which class to instantiate.
"""

from .base import LLMError, LLMJSONError, LLMProvider, LLMResponse
from .guards import JSONOutputGuard
from .openai_provider import OpenAIProvider
from .registry import MODEL_CATALOG, create_provider, model_ids, model_label

__all__ = [
    "LLMError",
    "LLMJSONError",
    "LLMProvider",
    "LLMResponse",
    "JSONOutputGuard",
    "OpenAIProvider",
    "MODEL_CATALOG",
    "create_provider",
    "model_ids",
    "model_label",
]
