"""Claude (Anthropic) Adapter"""

from aic2 import COMMIT
from aic2.config import ProviderConfig
from aic2.errors import InvalidModelError
from aic2.llm.base import ProviderAdapter, chat_completion_body, complete_chat


class ClaudeAdapter(ProviderAdapter):
    """Claude through Anthropic's OpenAI-compatible chat completions endpoint."""

    name = "claude"
    label = "Claude"
    DEFAULT_HOST = "https://api.anthropic.com"
    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    CHAT_PATH = "/v1/chat/completions"
    SUPPORTED_MODELS = (
        "claude-sonnet-4-20250514",
        "claude-opus-4-20250514",
        "claude-sonnet-4-5",
        "claude-opus-4-1",
        "claude-haiku-4-5",
        "claude-3-7-sonnet-latest",
        "claude-3-5-haiku-latest",
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
