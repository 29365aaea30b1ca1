"""LLM Adapter Package"""

from aic2.errors import ConfigurationError, LLMError
from aic2.llm.base import ProviderAdapter, build_messages, sampling_params
from aic2.llm.claude import ClaudeAdapter
from aic2.llm.codestral import CodestralAdapter
from aic2.llm.mistral import MistralAdapter
from aic2.llm.models import Candidate, DiffPayload, DisplayItem
from aic2.llm.ollama import OllamaAdapter
from aic2.llm.openai import OpenAIAdapter
from aic2.llm.perplexity import PerplexityAdapter

PROVIDERS = {
    adapter.name: adapter
    for adapter in (
        OpenAIAdapter,
        MistralAdapter,
        CodestralAdapter,
        PerplexityAdapter,
        OllamaAdapter,
        ClaudeAdapter,
    )
}


def get_adapter(provider: str, **kwargs) -> ProviderAdapter:
    """Instantiate the adapter registered as `provider`; kwargs go to its constructor."""
    try:
        adapter_class = PROVIDERS[provider]
    except KeyError:
        raise ConfigurationError(
            f"Unknown provider: {provider}. Use one of: {', '.join(sorted(PROVIDERS))}"
        ) from None
    return adapter_class(**kwargs)


__all__ = [
    "ProviderAdapter",
    "OpenAIAdapter",
    "MistralAdapter",
    "CodestralAdapter",
    "PerplexityAdapter",
    "OllamaAdapter",
    "ClaudeAdapter",
    "Candidate",
    "DiffPayload",
    "DisplayItem",
    "LLMError",
    "PROVIDERS",
    "get_adapter",
    "build_messages",
    "sampling_params",
]
