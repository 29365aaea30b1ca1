"""Perplexity Adapter"""

from aic2 import COMMIT
from aic2.config import ProviderConfig
from aic2.errors import InvalidModelError
from aic2.llm.base import ProviderAdapter, chat_completion_body, complete_chat


class PerplexityAdapter(ProviderAdapter):
    """Perplexity chat completions (no /v1 prefix, no JSON mode, no seed)."""

    name = "perplexity"
    label = "Perplexity"
    DEFAULT_HOST = "https://api.perplexity.ai"
    DEFAULT_MODEL = "sonar"
    CHAT_PATH = "/chat/completions"
    SUPPORTED_MODELS = (
        "sonar",
        "sonar-pro",
        "sonar-reasoning",
        "sonar-reasoning-pro",
        "sonar-deep-research",
        "r1-1776",
    )

    async def validate_model(self, config: ProviderConfig) -> None:
        if self.model(config) not in self.SUPPORTED_MODELS:
            raise InvalidModelError(self.label, self.model(config))

    async def invoke_chat(self, system_prompt: str, user_message: str,
                          config: ProviderConfig, mode: str = COMMIT) -> str:
        url = f"{self.host(config)}{config.path or self.CHAT_PATH}"
        body = chat_completion_body(self.model(config), system_prompt, user_message, config)
        request = self.request("POST", url, config).set_body(body)
        return await complete_chat(self.http, request)
