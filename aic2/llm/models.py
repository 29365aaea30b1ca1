"""Data passed between the prompt, adapter, parser and display stages."""

from dataclasses import dataclass

from aic2 import REQUEST_TYPES
from aic2.errors import ClassifiedError


@dataclass(frozen=True)
class DiffPayload:
    """Staged diff text and the kind of output requested for it."""
    diff: str
    mode: str = "commit"

    def __post_init__(self):
        if self.mode not in REQUEST_TYPES:
            raise ValueError(f"Unknown request type: {self.mode}")


@dataclass(frozen=True)
class Candidate:
    """One commit message or review suggestion."""
    title: str
    value: str = ""


@dataclass
class ChatExchange:
    """One prompt/reply round trip with a backend."""
    system_prompt: str
    user_message: str
    reply: str = ""


@dataclass(frozen=True)
class DisplayItem:
    """Entry handed to the selection layer."""
    name: str
    short: str
    value: str
    description: str = ""
    is_error: bool = False
    disabled: bool = False
    error: ClassifiedError | None = None
