"""
Tests for CLI output formatting and the generate flow.

Shows sample output for each scenario. Run with:
    pytest tests/test_display.py -v
    pytest tests/test_display.py -v -s   # see actual terminal output
"""

import re

import pytest

from aic2.cli.args import parse_args
from aic2.cli.main import _report, main
from aic2.cli.utils import display_items, format_item
from aic2.config import Config
from aic2.errors import BackendError
from aic2.llm import OpenAIAdapter
from aic2.llm.classifier import error_item
from aic2.llm.models import DiffPayload, DisplayItem

from conftest import FakeBackend, chat_response, models_response

ANSI_RE = re.compile(r'\033\[[0-9;]*m')


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def strip_ansi():
    """Return a function that removes ANSI escape codes."""
    def _strip(text: str) -> str:
        return ANSI_RE.sub('', text)
    return _strip


@pytest.fixture
def print_sample(capsys):
    """Return a function that replays captured output for -s viewing."""
    def _print(out: str):
        with capsys.disabled():
            try:
                print(out)
            except UnicodeEncodeError:
                cleaned = ANSI_RE.sub('', out)
                print(cleaned.encode('ascii', errors='replace').decode('ascii'))
    return _print


def candidate(title, body="", label="ChatGPT"):
    value = f"{title}\n\n{body}" if body else title
    return DisplayItem(name=f"[{label}] {title}", short=title, value=value, description=value if body else "")


def failure(message, label="ChatGPT"):
    return error_item(label, BackendError(message, 401))


# ---------------------------------------------------------------------------
# Item formatting
# ---------------------------------------------------------------------------

class TestFormatItem:

    def test_title_only(self, strip_ansi):
        out = strip_ansi(format_item(candidate("fix(api): handle null response"), 1))
        assert out == "[1] [ChatGPT] fix(api): handle null response"

    def test_body_skips_repeated_title(self, strip_ansi):
        item = candidate("feat(auth): add JWT token refresh",
                         "- implement automatic refresh\n- store refresh token in cookies")
        out = strip_ansi(format_item(item, 2))
        lines = out.split("\n")

        assert lines[0] == "[2] [ChatGPT] feat(auth): add JWT token refresh"
        assert out.count("feat(auth): add JWT token refresh") == 1
        assert "    - implement automatic refresh" in lines
        assert "    - store refresh token in cookies" in lines

    def test_error_item(self, strip_ansi):
        out = strip_ansi(format_item(failure("Incorrect API key"), 1))
        assert "[ChatGPT] Incorrect API key" in out
        assert "[1]" not in out


class TestDisplayItems:

    def test_numbers_only_candidates(self, capsys, strip_ansi, print_sample):
        display_items([candidate("feat: one", label="MistralAI"), candidate("feat: two", label="MistralAI")])
        out = capsys.readouterr().out
        print_sample(out)
        out = strip_ansi(out)

        assert "[1] [MistralAI] feat: one" in out
        assert "[2] [MistralAI] feat: two" in out
        assert "· · ·" in out

    def test_single_error(self, capsys, strip_ansi):
        display_items([failure("Error connecting to api.openai.com (getaddrinfo)")])
        out = strip_ansi(capsys.readouterr().out)
        assert "[ChatGPT] Error connecting to api.openai.com (getaddrinfo)" in out
        assert "· · ·" not in out


# ---------------------------------------------------------------------------
# Reporting and exit codes
# ---------------------------------------------------------------------------

class TestReport:

    def test_pipe_prints_first_value(self, capsys):
        items = [candidate("feat: first", "- detail"), candidate("feat: second")]
        assert _report(items, is_pipe=True, strict=False) == 0
        assert capsys.readouterr().out == "feat: first\n\n- detail\n"

    def test_pipe_sends_errors_to_stderr(self, capsys):
        assert _report([failure("Unauthorized")], is_pipe=True, strict=False) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Unauthorized" in captured.err

    def test_strict_fails_on_error(self):
        assert _report([failure("Unauthorized")], is_pipe=True, strict=True) == 1

    def test_strict_passes_on_candidates(self, capsys):
        assert _report([candidate("feat: ok")], is_pipe=False, strict=True) == 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.provider is None
        assert args.generate is None
        assert not args.review and not args.strict

    def test_generate_range(self):
        assert parse_args(["-g", "5"]).generate == 5
        with pytest.raises(SystemExit):
            parse_args(["-g", "6"])

    def test_unknown_provider_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["-p", "bard"])


# ---------------------------------------------------------------------------
# Full generate flow with git and the network faked
# ---------------------------------------------------------------------------

class FakeGit:
    diff = "+foo"

    def get_staged_files(self):
        return ["foo.py"]

    def get_staged_diff(self, mode="commit"):
        return DiffPayload(self.diff, mode)


@pytest.fixture
def fake_cli(monkeypatch):
    """Wire main() to a fake git repo and a fake OpenAI backend."""
    backend = FakeBackend({
        ("GET", "/v1/models"): models_response("gpt-4o-mini"),
        ("POST", "/v1/chat/completions"): chat_response(
            '{"commitMessages":[{"title":"Add foo","value":""},{"title":"feat: foo","value":""}]}'
        ),
    })
    config = Config(providers={"openai": {"key": "sk-test"}})

    monkeypatch.setattr("aic2.cli.main.GitAnalyzer", FakeGit)
    monkeypatch.setattr("aic2.cli.main.load_config", lambda: config)
    monkeypatch.setattr(
        "aic2.cli.main.get_adapter",
        lambda provider, **kwargs: OpenAIAdapter(transport=backend.transport, **kwargs),
    )
    return backend


class TestMain:

    def test_requires_provider(self, fake_cli, capsys):
        assert main([]) == 1
        assert "No provider selected" in capsys.readouterr().err

    def test_pipe_output(self, fake_cli, capsys):
        assert main(["-p", "openai", "-g", "2"]) == 0
        assert capsys.readouterr().out == "Add foo\n"
        assert "exactly 2 commit messages" in fake_cli.bodies()[0]["messages"][0]["content"]

    def test_model_override(self, fake_cli, capsys):
        assert main(["-p", "openai", "-m", "gpt-9", "--strict"]) == 1
        assert "Invalid model type of OpenAI: gpt-9" in capsys.readouterr().err

    def test_failure_without_strict_exits_zero(self, fake_cli):
        assert main(["-p", "openai", "-m", "gpt-9"]) == 0

    def test_empty_diff(self, fake_cli, monkeypatch, capsys):
        monkeypatch.setattr(FakeGit, "diff", "")
        assert main(["-p", "openai"]) == 1
        assert "No staged changes" in capsys.readouterr().err
