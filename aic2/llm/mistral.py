"""Mistral AI Adapter"""

from aic2 import COMMIT
from aic2.config import ProviderConfig
from aic2.errors import InvalidModelError
from aic2.llm.base import ProviderAdapter, chat_completion_body, complete_chat, fetch_model_ids, random_seed


class MistralAdapter(ProviderAdapter):
    """Mistral chat completions; the model is checked against the live listing."""

    name = "mistral"
    label = "MistralAI"
    DEFAULT_HOST = "https://api.mistral.ai"
    DEFAULT_MODEL = "mistral-small-latest"
    CHAT_PATH = "/v1/chat/completions"

    async def available_models(self, config: ProviderConfig) -> list[str]:
        request = self.request("GET", f"{self.host(config)}/v1/models", config)
        return await fetch_model_ids(self.http, request)

    async def validate_model(self, config: ProviderConfig) -> None:
        if self.model(config) not in await self.available_models(config):
            raise InvalidModelError(self.label, self.model(config))

    def chat_body(self, system_prompt: str, user_message: str, config: ProviderConfig, mode: str) -> dict:
        body = chat_completion_body(self.model(config), system_prompt, user_message, config)
        body["safe_prompt"] = False
        body["random_seed"] = random_seed()
        if self.json_mode(mode):
            body["response_format"] = {"type": "json_object"}
        return body

    async def invoke_chat(self, system_prompt: str, user_message: str,
                          config: ProviderConfig, mode: str = COMMIT) -> str:
        url = f"{self.host(config)}{config.path or self.CHAT_PATH}"
        request = self.request("POST", url, config).set_body(
            self.chat_body(system_prompt, user_message, config, mode)
        )
        return await complete_chat(self.http, request)
