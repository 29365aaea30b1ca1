"""Codestral Adapter"""

from aic2.config import ProviderConfig
from aic2.errors import InvalidModelError
from aic2.llm.mistral import MistralAdapter


class CodestralAdapter(MistralAdapter):
    """Mistral's code endpoint. Same request shape, fixed model list, no listing call."""

    name = "codestral"
    label = "Codestral"
    DEFAULT_HOST = "https://codestral.mistral.ai"
    DEFAULT_MODEL = "codestral-latest"
    SUPPORTED_MODELS = ("codestral-latest", "codestral-2501")

    async def validate_model(self, config: ProviderConfig) -> None:
        if self.model(config) not in self.SUPPORTED_MODELS:
            raise InvalidModelError(self.label, self.model(config))
