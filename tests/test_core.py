"""
Unit tests for core modules: PromptBuilder, Config, ConfigManager, DiffPayload.

Run with:
    pytest tests/test_core.py -v
"""

import json

import pytest

from aic2.config import Config, ConfigManager, ProviderConfig
from aic2.errors import ConfigurationError
from aic2.llm.models import DiffPayload
from aic2.prompts.builder import ENVELOPE_KEY, PromptBuilder, PromptOptions, build_prompt


# ---------------------------------------------------------------------------
# PromptBuilder: commit mode
# ---------------------------------------------------------------------------

class TestPromptBuilderCommit:

    @pytest.fixture
    def builder(self):
        return PromptBuilder()

    def test_build_returns_string(self, builder):
        result = builder.build(PromptOptions(), "commit")
        assert isinstance(result, str)
        assert len(result) > 0

    def test_asks_for_json_envelope(self, builder):
        result = builder.build(PromptOptions(), "commit")
        assert f'{{"{ENVELOPE_KEY}": [' in result
        assert '"title"' in result and '"value"' in result

    def test_candidate_count(self, builder):
        result = builder.build(PromptOptions(generate=3), "commit")
        assert "exactly 3 commit messages" in result
        assert result.count('{"title": "...", "value": "..."}') == 3

    def test_locale_and_length(self, builder):
        result = builder.build(PromptOptions(locale="ko", max_length=72), "commit")
        assert "in ko" in result
        assert "at most 72 characters" in result

    def test_conventional_types_listed(self, builder):
        result = builder.build(PromptOptions(type="conventional"), "commit")
        assert "type(scope): subject" in result
        assert "  - feat:" in result

    def test_gitmoji_convention(self, builder):
        result = builder.build(PromptOptions(type="gitmoji"), "commit")
        assert ":sparkles:" in result
        assert "type(scope)" not in result

    def test_free_form_has_no_convention_section(self, builder):
        result = builder.build(PromptOptions(type=""), "commit")
        assert "<format>" not in result

    def test_inline_override_replaces_prompt(self, builder):
        result = builder.build(PromptOptions(system_prompt="Write haiku commits."), "commit")
        assert result == "Write haiku commits."

    def test_file_override_beats_inline(self, builder, tmp_path):
        prompt_file = tmp_path / "prompt.txt"
        prompt_file.write_text("From file.", encoding="utf-8")
        options = PromptOptions(system_prompt="Inline.", system_prompt_path=str(prompt_file))
        assert builder.build(options, "commit") == "From file."

    def test_missing_override_file(self, builder, tmp_path):
        options = PromptOptions(system_prompt_path=str(tmp_path / "missing.txt"))
        with pytest.raises(ConfigurationError, match="missing.txt"):
            builder.build(options, "commit")

    def test_unknown_mode(self, builder):
        with pytest.raises(ConfigurationError):
            builder.build(PromptOptions(), "summary")


# ---------------------------------------------------------------------------
# PromptBuilder: review mode
# ---------------------------------------------------------------------------

class TestPromptBuilderReview:

    def test_review_prompt(self):
        result = build_prompt(PromptOptions(locale="de"), "review")
        assert "code quality and correctness" in result
        assert "in de" in result
        assert ENVELOPE_KEY not in result

    def test_review_ignores_commit_overrides(self):
        result = build_prompt(PromptOptions(system_prompt="commit only"), "review")
        assert result != "commit only"

    def test_review_file_override(self, tmp_path):
        prompt_file = tmp_path / "review.md"
        prompt_file.write_text("Review strictly.", encoding="utf-8")
        result = build_prompt(PromptOptions(code_review_prompt_path=str(prompt_file)), "review")
        assert result == "Review strictly."

    def test_default_options(self):
        assert build_prompt(None, "review") == build_prompt(PromptOptions(), "review")


# ---------------------------------------------------------------------------
# DiffPayload
# ---------------------------------------------------------------------------

class TestDiffPayload:

    def test_defaults_to_commit(self):
        assert DiffPayload("+foo").mode == "commit"

    def test_rejects_unknown_mode(self):
        with pytest.raises(ValueError):
            DiffPayload("+foo", mode="summary")


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.provider is None
        assert config.locale == "en"
        assert config.generate == 1
        assert config.type == "conventional"
        assert config.logging is False

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"provider": "mistral", "unknown_key": "value"})
        assert config.provider == "mistral"
        assert not hasattr(config, "unknown_key")

    def test_validate_invalid_provider(self):
        config = Config(provider="gpt4")
        warnings = config.validate()
        assert len(warnings) == 1
        assert config.provider is None

    def test_validate_invalid_type(self):
        config = Config(type="angular")
        assert len(config.validate()) == 1
        assert config.type == "conventional"

    @pytest.mark.parametrize("generate", [0, 6, "2", True])
    def test_validate_invalid_generate(self, generate):
        config = Config(generate=generate)
        assert any("generate" in w for w in config.validate())
        assert config.generate == 1

    def test_validate_invalid_sampling(self):
        config = Config(temperature=5, top_p=-1, timeout=0)
        warnings = config.validate()
        assert len(warnings) == 3
        assert (config.temperature, config.top_p, config.timeout) == (0.7, 1.0, 10.0)

    def test_validate_drops_unknown_provider_sections(self):
        config = Config(providers={"openai": {"model": "gpt-4o"}, "bard": {}})
        warnings = config.validate()
        assert any("bard" in w for w in warnings)
        assert list(config.providers) == ["openai"]

    def test_validate_checks_provider_sections(self):
        config = Config(temperature=0.3, providers={
            "openai": {"temperature": 5, "timeout": "30", "stream": "yes", "model": "gpt-4o", "bogus": 1},
            "ollama": {"num_ctx": 0, "top_p": 0.5},
        })
        warnings = config.validate()

        assert len(warnings) == 5
        assert any("temperature" in w and "openai" in w for w in warnings)
        assert config.providers == {"openai": {"model": "gpt-4o"}, "ollama": {"top_p": 0.5}}
        assert config.provider_config("openai").temperature == 0.3
        assert config.provider_config("openai").timeout == 10.0

    def test_provider_config_skips_invalid_values_without_validate(self):
        config = Config(providers={"mistral": {"max_tokens": True, "timeout": -1, "host": 42}})
        provider = config.provider_config("mistral")
        assert (provider.max_tokens, provider.timeout, provider.host) == (1024, 10.0, "")

    def test_validate_invalid_shared_flags(self):
        config = Config(include_body="yes", proxy=8080)
        assert len(config.validate()) == 2
        assert (config.include_body, config.proxy) == (False, None)

    def test_validate_valid_config_no_warnings(self):
        assert Config().validate() == []

    def test_from_dict_triggers_validation(self, capsys):
        Config.from_dict({"provider": "invalid"})
        err = capsys.readouterr().err
        assert "Config warning" in err

    def test_prompt_options(self):
        config = Config(locale="fr", generate=3, type="gitmoji", max_length=60)
        options = config.prompt_options()
        assert options == PromptOptions(locale="fr", generate=3, type="gitmoji", max_length=60)

    def test_provider_config_overlays_section(self):
        config = Config(temperature=0.2, timeout=30, providers={
            "openai": {"model": "gpt-4o", "key": "sk-file", "timeout": 60, "stream": True, "bogus": 1},
        })
        provider = config.provider_config("openai")
        assert provider == ProviderConfig(model="gpt-4o", key="sk-file", temperature=0.2, timeout=60, stream=True)

    def test_provider_key_from_environment(self, monkeypatch):
        monkeypatch.setenv("MISTRAL_API_KEY", "env-key")
        assert Config().provider_config("mistral").key == "env-key"

    def test_file_key_beats_environment(self, monkeypatch):
        monkeypatch.setenv("MISTRAL_API_KEY", "env-key")
        config = Config(providers={"mistral": {"key": "file-key"}})
        assert config.provider_config("mistral").key == "file-key"

    def test_unknown_provider_config(self):
        with pytest.raises(ConfigurationError):
            Config().provider_config("bard")

    def test_provider_config_is_frozen(self):
        provider = Config().provider_config("ollama")
        with pytest.raises(AttributeError):
            provider.model = "other"


class TestConfigManager:

    def test_load_returns_defaults_when_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        manager = ConfigManager()
        config = manager.load()
        assert config.provider is None
        assert manager.get_config_path() is None

    def test_load_reads_local_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / ".aic2rc"
        config_file.write_text(json.dumps({"provider": "ollama", "locale": "ja", "logging": True}))

        manager = ConfigManager()
        config = manager.load()
        assert config.provider == "ollama"
        assert config.locale == "ja"
        assert config.logging is True
        assert manager.get_config_path() == config_file

    def test_load_reads_home_file(self, tmp_path, monkeypatch):
        home = tmp_path / "home"
        home.mkdir()
        (home / ".aic2rc").write_text(json.dumps({"provider": "claude"}))
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: home)

        assert ConfigManager().load().provider == "claude"

    def test_load_is_cached(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        manager = ConfigManager()
        assert manager.load() is manager.load()

    def test_malformed_json_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".aic2rc").write_text("not valid json {{{")

        config = ConfigManager().load()
        assert config.provider is None

    def test_non_object_json_returns_defaults(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".aic2rc").write_text("[1, 2]")

        config = ConfigManager().load()
        assert config == Config()
        assert "JSON object" in capsys.readouterr().err
