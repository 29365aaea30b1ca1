"""Ollama Adapter for Local Models"""

import json
from contextlib import aclosing

from aic2 import COMMIT
from aic2.config import ProviderConfig
from aic2.errors import BackendError, InvalidModelError, MalformedResponseError, TransportError, CONNECTION_REFUSED
from aic2.llm.base import NO_CONTENT_MESSAGE, ProviderAdapter, build_messages, random_seed
from aic2.llm.parser import error_message_from_payload


class OllamaAdapter(ProviderAdapter):
    """
    Ollama chat API. Requires: ollama serve

    The key is optional; when set it is sent as `<auth> <key>` for
    Ollama instances behind an authenticating proxy.
    """

    name = "ollama"
    label = "Ollama"
    DEFAULT_HOST = "http://localhost:11434"
    DEFAULT_MODEL = "llama3.2"
    KEEP_ALIVE = "10m"
    requires_key = False

    def display_label(self, config: ProviderConfig) -> str:
        return f"Ollama_{self.model(config)}"

    async def _check_running(self, config: ProviderConfig) -> None:
        """Check if Ollama is running and accessible."""
        host = self.host(config)
        try:
            await self.http.execute(self.request("GET", host, config))
        except TransportError as e:
            if e.kind == CONNECTION_REFUSED:
                raise TransportError(
                    f"Error connecting to {host}. Please run Ollama or check host", e.host, CONNECTION_REFUSED
                ) from e
            raise

    async def installed_models(self, config: ProviderConfig) -> list[str]:
        response = await self.http.execute(self.request("GET", f"{self.host(config)}/api/tags", config))
        data = response.json()
        models = data.get("models") if isinstance(data, dict) else None
        return [m.get("name", "") for m in models or [] if isinstance(m, dict)]

    async def validate_model(self, config: ProviderConfig) -> None:
        await self._check_running(config)
        model = self.model(config)
        installed = await self.installed_models(config)
        # "llama3.2" refers to the same model as "llama3.2:latest"
        if not any(name == model or name == f"{model}:latest" for name in installed):
            raise InvalidModelError("Ollama", f"{model}. Run: ollama pull {model}")

    def chat_body(self, system_prompt: str, user_message: str, config: ProviderConfig, mode: str) -> dict:
        body = {
            "model": self.model(config),
            "messages": build_messages(system_prompt, user_message),
            "stream": config.stream,
            "keep_alive": self.KEEP_ALIVE,
            "options": {
                "num_ctx": config.num_ctx,
                "temperature": config.temperature,
                "top_p": config.top_p,
                "num_predict": config.max_tokens,
                "seed": random_seed(),
            },
        }
        if self.json_mode(mode):
            body["format"] = "json"
        return body

    async def invoke_chat(self, system_prompt: str, user_message: str,
                          config: ProviderConfig, mode: str = COMMIT) -> str:
        request = self.request("POST", f"{self.host(config)}/api/chat", config).set_body(
            self.chat_body(system_prompt, user_message, config, mode)
        )
        if config.stream:
            content = await self._read_stream(request)
        else:
            content = self._message_content((await self.http.execute(request)).json())

        if not content.strip():
            raise MalformedResponseError(NO_CONTENT_MESSAGE)
        return content

    def _message_content(self, chunk) -> str:
        if not isinstance(chunk, dict):
            raise MalformedResponseError(NO_CONTENT_MESSAGE)
        if "error" in chunk:
            raise BackendError(error_message_from_payload(chunk) or "Ollama error", 200, chunk)
        content = (chunk.get("message") or {}).get("content")
        return content if isinstance(content, str) else ""

    async def _read_stream(self, request) -> str:
        """Accumulate NDJSON chunks until the final `done` chunk."""
        parts = []
        async with aclosing(self.http.stream_lines(request)) as lines:
            async for line in lines:
                try:
                    chunk = json.loads(line)
                except json.JSONDecodeError as e:
                    raise MalformedResponseError("Invalid chunk in response from Ollama") from e
                parts.append(self._message_content(chunk))
                if chunk.get("done"):
                    break
        return "".join(parts)
