"""Configuration Management Package"""

import json
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from aic2 import COMMIT_CONVENTIONS
from aic2.errors import ConfigurationError
from aic2.prompts.builder import PromptOptions

# Registry names; aic2.llm.PROVIDERS uses the same keys
VALID_PROVIDERS = {"openai", "mistral", "codestral", "perplexity", "ollama", "claude"}

# Fallback for a provider's "key" when the rc file leaves it empty
API_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "mistral": "MISTRAL_API_KEY",
    "codestral": "CODESTRAL_API_KEY",
    "perplexity": "PERPLEXITY_API_KEY",
    "ollama": "OLLAMA_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
}

MAX_GENERATE = 5


@dataclass(frozen=True)
class ProviderConfig:
    """Per-backend request settings. Adapters read it and never change it."""
    host: str = ""
    key: str = ""
    model: str = ""
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1024
    timeout: float = 10.0
    proxy: Optional[str] = None
    stream: bool = False
    include_body: bool = False
    auth: str = "Bearer"
    path: str = ""
    num_ctx: int = 2048


_PROVIDER_FIELDS = {f.name for f in fields(ProviderConfig)}
# Settings that can be given once at the top level and overridden per provider
_SHARED_FIELDS = ("temperature", "top_p", "max_tokens", "timeout", "proxy", "include_body")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_str(value) -> bool:
    return isinstance(value, str)


# Type and range checks shared by the top level and the provider sections
_FIELD_CHECKS = {
    "temperature": lambda v: _is_number(v) and 0 <= v <= 2,
    "top_p": lambda v: _is_number(v) and 0 <= v <= 1,
    "max_tokens": lambda v: _is_int(v) and v > 0,
    "timeout": lambda v: _is_number(v) and v > 0,
    "num_ctx": lambda v: _is_int(v) and v > 0,
    "proxy": lambda v: v is None or _is_str(v),
    "stream": lambda v: isinstance(v, bool),
    "include_body": lambda v: isinstance(v, bool),
}


def _check_section(name: str, section: dict) -> tuple[dict, list[str]]:
    """Split one provider section into its valid settings and warnings."""
    valid, warnings = {}, []
    for key, value in section.items():
        if key not in _PROVIDER_FIELDS:
            warnings.append(f"Unknown setting '{key}' in provider '{name}', ignoring it")
            continue
        if not _FIELD_CHECKS.get(key, _is_str)(value):
            warnings.append(f"Invalid {key} '{value}' in provider '{name}', ignoring it")
            continue
        valid[key] = value
    return valid, warnings


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: Optional[str] = None
    locale: str = "en"
    generate: int = 1
    type: str = "conventional"
    max_length: int = 50
    include_body: bool = False
    system_prompt: str = ""
    system_prompt_path: str = ""
    code_review_prompt_path: str = ""
    logging: bool = False
    logs_dir: str = "~/.aic2/logs"
    temperature: float = 0.7
    top_p: float = 1.0
    max_tokens: int = 1024
    timeout: float = 10.0
    proxy: Optional[str] = None
    providers: dict = field(default_factory=dict)

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        if self.provider is not None and self.provider not in VALID_PROVIDERS:
            warnings.append(f"Invalid provider '{self.provider}', ignoring it")
            self.provider = defaults.provider

        if self.type not in COMMIT_CONVENTIONS:
            warnings.append(f"Invalid type '{self.type}', using '{defaults.type}'")
            self.type = defaults.type

        if not isinstance(self.generate, int) or isinstance(self.generate, bool) or not 1 <= self.generate <= MAX_GENERATE:
            warnings.append(f"Invalid generate '{self.generate}', using {defaults.generate}")
            self.generate = defaults.generate

        if not isinstance(self.max_length, int) or self.max_length <= 0:
            warnings.append(f"Invalid max_length '{self.max_length}', using {defaults.max_length}")
            self.max_length = defaults.max_length

        for key in _SHARED_FIELDS:
            value = getattr(self, key)
            if not _FIELD_CHECKS[key](value):
                warnings.append(f"Invalid {key} '{value}', using {getattr(defaults, key)}")
                setattr(self, key, getattr(defaults, key))

        if not isinstance(self.providers, dict):
            warnings.append("Invalid providers section, ignoring it")
            self.providers = {}

        self.providers = dict(self.providers)
        for name in list(self.providers):
            if name not in VALID_PROVIDERS:
                warnings.append(f"Unknown provider section '{name}', ignoring it")
                del self.providers[name]
            elif not isinstance(self.providers[name], dict):
                warnings.append(f"Provider section '{name}' must be an object, ignoring it")
                del self.providers[name]
            else:
                self.providers[name], section_warnings = _check_section(name, self.providers[name])
                warnings.extend(section_warnings)

        return warnings

    def prompt_options(self) -> PromptOptions:
        return PromptOptions(
            locale=self.locale,
            max_length=self.max_length,
            type=self.type,
            generate=self.generate,
            system_prompt=self.system_prompt,
            system_prompt_path=self.system_prompt_path,
            code_review_prompt_path=self.code_review_prompt_path,
        )

    def provider_config(self, name: str) -> ProviderConfig:
        """Global sampling defaults overlaid with the provider's own section."""
        if name not in VALID_PROVIDERS:
            raise ConfigurationError(f"Unknown provider: {name}. Use one of: {', '.join(sorted(VALID_PROVIDERS))}")

        values = {k: getattr(self, k) for k in _SHARED_FIELDS}
        section, _ = _check_section(name, self.providers.get(name, {}))
        values.update(section)
        if not values.get("key"):
            values["key"] = os.environ.get(API_KEY_ENV[name], "")
        return ProviderConfig(**values)

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            print(f"Config warning: {warning}", file=sys.stderr)
        return config


class ConfigManager:
    """Loads configuration from the local or global rc file."""

    CONFIG_FILENAME = ".aic2rc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                return self._config

        self._config = Config()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Could not load {path}: {e}", file=sys.stderr)
            return Config()
        if not isinstance(data, dict):
            print(f"Warning: {path} must contain a JSON object", file=sys.stderr)
            return Config()
        return Config.from_dict(data)

    def get_config_path(self) -> Optional[Path]:
        return self._config_path


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


__all__ = [
    "Config",
    "ConfigManager",
    "ProviderConfig",
    "load_config",
    "get_config_path",
    "VALID_PROVIDERS",
    "API_KEY_ENV",
]
