"""OpenAI (ChatGPT) Adapter"""

from aic2 import COMMIT
from aic2.config import ProviderConfig
from aic2.errors import InvalidModelError
from aic2.llm.base import (
    ProviderAdapter, chat_completion_body, complete_chat, fetch_model_ids, stream_chat_completion,
)


class OpenAIAdapter(ProviderAdapter):
    """OpenAI chat completions. `path` in the config points it at compatible servers."""

    name = "openai"
    label = "ChatGPT"
    DEFAULT_HOST = "https://api.openai.com"
    DEFAULT_MODEL = "gpt-4o-mini"
    CHAT_PATH = "/v1/chat/completions"
    MODELS_PATH = "/v1/models"

    async def validate_model(self, config: ProviderConfig) -> None:
        request = self.request("GET", f"{self.host(config)}{self.MODELS_PATH}", config)
        available = await fetch_model_ids(self.http, request)
        if self.model(config) not in available:
            raise InvalidModelError("OpenAI", self.model(config))

    async def invoke_chat(self, system_prompt: str, user_message: str,
                          config: ProviderConfig, mode: str = COMMIT) -> str:
        body = chat_completion_body(self.model(config), system_prompt, user_message, config, stream=config.stream)
        if self.json_mode(mode):
            body["response_format"] = {"type": "json_object"}

        url = f"{self.host(config)}{config.path or self.CHAT_PATH}"
        request = self.request("POST", url, config).set_body(body)
        if config.stream:
            return await stream_chat_completion(self.http, request)
        return await complete_chat(self.http, request)
