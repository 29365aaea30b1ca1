"""Prompt Builder - System prompts for commit message and code review requests."""

from dataclasses import dataclass
from pathlib import Path

from aic2 import COMMIT, REVIEW, COMMIT_TYPES, GITMOJIS
from aic2.errors import ConfigurationError

# Kept in sync with aic2.llm.parser.COMMIT_ENVELOPE_KEY
ENVELOPE_KEY = "commitMessages"

REVIEW_FOCUS_AREAS = [
    "Correctness: logic errors, unhandled edge cases, broken error handling",
    "Security: injection, secrets in code, unsafe input handling",
    "Performance: needless work in hot paths, N+1 queries, blocking calls",
    "Readability: naming, dead code, functions doing too much",
    "Tests: missing coverage for the behavior that changed",
]


@dataclass(frozen=True)
class PromptOptions:
    """Resolved prompt settings for one request."""
    locale: str = "en"
    max_length: int = 50
    type: str = "conventional"
    generate: int = 1
    system_prompt: str = ""
    system_prompt_path: str = ""
    code_review_prompt_path: str = ""

    @property
    def has_commit_override(self) -> bool:
        """True when a custom prompt replaces the built-in commit prompt."""
        return bool(self.system_prompt_path or self.system_prompt)


DEFAULT_PROMPT_OPTIONS = PromptOptions()


def _read_prompt_file(path: str) -> str:
    try:
        return Path(path).expanduser().read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Error reading prompt file: {path} ({e.__class__.__name__})") from e


class PromptBuilder:
    """Constructs system prompts for the commit and review modes."""

    def build(self, options: PromptOptions | None = None, mode: str = COMMIT) -> str:
        options = options or DEFAULT_PROMPT_OPTIONS
        if mode == REVIEW:
            return self.build_review(options)
        if mode == COMMIT:
            return self.build_commit(options)
        raise ConfigurationError(f"Unknown request type: {mode}")

    def build_commit(self, options: PromptOptions) -> str:
        if options.system_prompt_path:
            return _read_prompt_file(options.system_prompt_path)
        if options.system_prompt:
            return options.system_prompt

        sections = [
            self._build_role_section(),
            self._build_convention_section(options),
            self._build_rules_section(options),
            self._build_output_section(options),
        ]
        return "\n\n".join(filter(None, sections))

    def build_review(self, options: PromptOptions) -> str:
        if options.code_review_prompt_path:
            return _read_prompt_file(options.code_review_prompt_path)

        focus = "\n".join(f"- {area}" for area in REVIEW_FOCUS_AREAS)
        return f"""You are a senior software engineer reviewing a pull request. You will receive a git diff.

Review the change for code quality and correctness. Look at:
{focus}

Rules:
- Only comment on code that appears in the diff
- Reference files and functions by name
- Suggest a concrete fix for every problem you raise
- If the change looks good, say so briefly

Write the review in {options.locale} using markdown.
The FIRST line must be a one-line summary of the review, with no heading or formatting.
Put the detailed comments below it."""

    def _build_role_section(self) -> str:
        return """You are an expert at writing git commit messages. You will receive a git diff.

Core principles:
- The DIFF shows WHAT changed. Your job is to explain WHY.
- Identify the PRIMARY purpose of the change and lead with it.
- Every word must earn its place, no filler.

Avoid:
- Vague verbs: "Update", "Change", "Modify" (be specific: "Add", "Remove", "Replace", "Extract")
- Restating the diff line by line"""

    def _build_convention_section(self, options: PromptOptions) -> str:
        if options.type == "conventional":
            types_list = "\n".join(f"  - {t}: {desc}" for t, desc in COMMIT_TYPES.items())
            return f"""<format>
Write each title in conventional commit format: type(scope): subject

Choose the most appropriate type:
{types_list}
</format>"""
        if options.type == "gitmoji":
            emoji_list = "\n".join(f"  - {code}: {desc}" for code, desc in GITMOJIS.items())
            return f"""<format>
Start each title with the gitmoji code that fits the change, followed by the subject: :emoji: subject

Choose from:
{emoji_list}
</format>"""
        return ""

    def _build_rules_section(self, options: PromptOptions) -> str:
        return f"""<rules>
- Write the messages in {options.locale}
- Title: imperative mood, at most {options.max_length} characters
- Value: the full commit message, the title followed by a blank line and a short body
</rules>"""

    def _build_output_section(self, options: PromptOptions) -> str:
        n = options.generate
        noun = "message" if n == 1 else "messages"
        items = ", ".join('{"title": "...", "value": "..."}' for _ in range(n))
        return f"""<instructions>
Generate exactly {n} commit {noun}. Each option must take a different angle on the change.

Respond ONLY with a JSON object in this exact shape, no markdown and no explanation:
{{"{ENVELOPE_KEY}": [{items}]}}
</instructions>"""


def build_prompt(options: PromptOptions | None, mode: str) -> str:
    """Render the system prompt for `mode` ("commit" or "review")."""
    return PromptBuilder().build(options, mode)
