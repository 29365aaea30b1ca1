"""LLM Base Classes and Shared Request Helpers"""

import json
import logging
import random
from abc import ABC, abstractmethod
from contextlib import aclosing
from datetime import datetime
from typing import AsyncIterator, Callable, Optional

import httpx

from aic2 import COMMIT, REVIEW
from aic2.audit import AuditLogger
from aic2.config import API_KEY_ENV, ProviderConfig
from aic2.errors import ConfigurationError, MalformedResponseError
from aic2.llm.classifier import error_item
from aic2.llm.http import HttpInvoker, HttpRequest
from aic2.llm.models import Candidate, ChatExchange, DiffPayload, DisplayItem
from aic2.llm.parser import parse_reply
from aic2.prompts.builder import DEFAULT_PROMPT_OPTIONS, PromptBuilder, PromptOptions

logger = logging.getLogger(__name__)

USER_MESSAGE_PREFIX = "Here is the diff: "
NO_CONTENT_MESSAGE = "No content in response. Please open a bug report"
SEED_RANGE = (10, 1000)


# =============================================================================
# Shared request construction
# =============================================================================

def build_messages(system_prompt: str, user_message: str) -> list[dict]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_message},
    ]


def sampling_params(config: ProviderConfig) -> dict:
    return {
        "temperature": config.temperature,
        "top_p": config.top_p,
        "max_tokens": config.max_tokens,
    }


def random_seed() -> int:
    """Request-scoped seed in [10, 1000)."""
    return random.randrange(*SEED_RANGE)


def auth_headers(config: ProviderConfig) -> dict:
    headers = {"content-type": "application/json"}
    if config.key:
        headers["Authorization"] = f"{config.auth} {config.key}"
    return headers


def chat_completion_body(model: str, system_prompt: str, user_message: str,
                         config: ProviderConfig, stream: bool = False) -> dict:
    """OpenAI-style chat completion body used by most backends."""
    return {
        "model": model,
        "messages": build_messages(system_prompt, user_message),
        **sampling_params(config),
        "stream": stream,
    }


def extract_chat_content(payload) -> str:
    """First choice's message content of a chat completion, or MalformedResponseError."""
    choices = payload.get("choices") if isinstance(payload, dict) else None
    if not choices or not isinstance(choices[0], dict):
        raise MalformedResponseError(NO_CONTENT_MESSAGE)
    content = (choices[0].get("message") or {}).get("content")
    if not isinstance(content, str) or not content.strip():
        raise MalformedResponseError(NO_CONTENT_MESSAGE)
    return content


async def complete_chat(http: HttpInvoker, request: HttpRequest) -> str:
    response = await http.execute(request)
    return extract_chat_content(response.json())


async def stream_chat_completion(http: HttpInvoker, request: HttpRequest) -> str:
    """Drain an SSE chat completion stream into one string."""
    parts = []
    async with aclosing(http.stream_lines(request)) as lines:
        async for line in lines:
            if not line.startswith("data:"):
                continue
            data = line[len("data:"):].strip()
            if data == "[DONE]":
                break
            try:
                chunk = json.loads(data)
            except json.JSONDecodeError as e:
                raise MalformedResponseError("Invalid chunk in streamed response") from e
            for choice in chunk.get("choices") or []:
                delta = choice.get("delta") or {}
                if isinstance(delta.get("content"), str):
                    parts.append(delta["content"])

    content = "".join(parts)
    if not content.strip():
        raise MalformedResponseError(NO_CONTENT_MESSAGE)
    return content


async def fetch_model_ids(http: HttpInvoker, request: HttpRequest) -> list[str]:
    """Model ids from an OpenAI-style `GET /v1/models` listing."""
    data = (await http.execute(request)).json()
    models = data.get("data") if isinstance(data, dict) else None
    return [
        m["id"] for m in models or []
        if isinstance(m, dict) and "id" in m and m.get("object", "model") == "model"
    ]


# =============================================================================
# Adapter contract
# =============================================================================

class ProviderAdapter(ABC):
    """
    Abstract base for backend adapters.

    Subclasses supply validate_model() and invoke_chat(); the request
    pipeline (prompt, validation, chat, audit log, parsing) and the
    mapping to display items are shared.
    """

    name: str = ""
    label: str = ""
    DEFAULT_HOST: str = ""
    DEFAULT_MODEL: str = ""
    requires_key: bool = True

    def __init__(self, prompt_options: PromptOptions | None = None,
                 audit_logger: AuditLogger | None = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.prompt_options = prompt_options or DEFAULT_PROMPT_OPTIONS
        self.audit_logger = audit_logger
        self.http = HttpInvoker(transport)
        self.prompt_builder = PromptBuilder()
        self._clock = clock

    def host(self, config: ProviderConfig) -> str:
        return (config.host or self.DEFAULT_HOST).rstrip("/")

    def model(self, config: ProviderConfig) -> str:
        return config.model or self.DEFAULT_MODEL

    def display_label(self, config: ProviderConfig) -> str:
        return self.label

    def json_mode(self, mode: str) -> bool:
        """Ask the backend for JSON only with the built-in commit prompt."""
        return mode == COMMIT and not self.prompt_options.has_commit_override

    def user_message(self, diff: str) -> str:
        return f"{USER_MESSAGE_PREFIX}{diff}"

    def request(self, method: str, url: str, config: ProviderConfig) -> HttpRequest:
        return HttpRequest(method, url, config.timeout, proxy=config.proxy).set_headers(auth_headers(config))

    @abstractmethod
    async def validate_model(self, config: ProviderConfig) -> None:
        """Raise InvalidModelError if the configured model is not available."""

    @abstractmethod
    async def invoke_chat(self, system_prompt: str, user_message: str,
                          config: ProviderConfig, mode: str = COMMIT) -> str:
        """One logical chat completion; returns the full reply text."""

    def _check_key(self, config: ProviderConfig) -> None:
        if self.requires_key and not config.key:
            env = API_KEY_ENV.get(self.name, "the provider's API key variable")
            raise ConfigurationError(f"No API key found for {self.label}. Set 'key' in .aic2rc or {env}")

    async def generate_candidates(self, diff: str | DiffPayload, config: ProviderConfig,
                                  mode: str | None = None) -> list[Candidate]:
        """Run one request end to end. Raises LLMError subclasses on failure."""
        payload = diff if isinstance(diff, DiffPayload) else DiffPayload(diff, mode or COMMIT)
        mode = mode or payload.mode
        now = self._clock()

        system_prompt = self.prompt_builder.build(self.prompt_options, mode)
        self._check_key(config)
        await self.validate_model(config)

        exchange = ChatExchange(system_prompt, self.user_message(payload.diff))
        exchange.reply = await self.invoke_chat(exchange.system_prompt, exchange.user_message, config, mode)

        if self.audit_logger is not None:
            self.audit_logger.record(self.display_label(config), payload.diff, system_prompt,
                                     exchange.reply, mode, now)
        return parse_reply(exchange.reply, mode)

    async def generate_commit_message(self, diff: str | DiffPayload,
                                      config: ProviderConfig) -> AsyncIterator[DisplayItem]:
        async for item in self._generate_items(diff, config, COMMIT):
            yield item

    async def generate_code_review(self, diff: str | DiffPayload,
                                   config: ProviderConfig) -> AsyncIterator[DisplayItem]:
        async for item in self._generate_items(diff, config, REVIEW):
            yield item

    async def _generate_items(self, diff, config: ProviderConfig, mode: str) -> AsyncIterator[DisplayItem]:
        label = self.display_label(config)
        try:
            candidates = await self.generate_candidates(diff, config, mode)
        except Exception as e:
            # Public boundary: every failure becomes one terminal error item
            yield error_item(label, e)
            return

        for candidate in candidates:
            yield self._to_item(label, candidate, config, mode)

    def _to_item(self, label: str, candidate: Candidate, config: ProviderConfig, mode: str) -> DisplayItem:
        if mode == REVIEW:
            value = candidate.value or candidate.title
            description = value
        elif config.include_body:
            value = candidate.value or candidate.title
            description = candidate.value
        else:
            value = candidate.title
            description = ""
        return DisplayItem(name=f"[{label}] {candidate.title}", short=candidate.title,
                           value=value, description=description)
