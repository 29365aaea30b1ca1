"""
Response Parsing

Turns free-form model output into Candidates:
- commit replies are JSON envelopes, with a plain-text fallback
- review replies are markdown, sanitized into a single candidate
- error bodies that wrap JSON in prose are scanned for the JSON part
"""

import json
import logging
import re

from aic2 import REVIEW
from aic2.errors import MalformedResponseError
from aic2.llm.models import Candidate

logger = logging.getLogger(__name__)

COMMIT_ENVELOPE_KEY = "commitMessages"
REVIEW_FALLBACK_TITLE = "Code Review"
UNKNOWN_ERROR_MESSAGE = "Unknown error"

# Upper bound on how far the error scanner walks through a body
MAX_SCAN_LENGTH = 100_000

_FENCE_OPEN = re.compile(r'^\s*```[\w+-]*[ \t]*\n?')
_FENCE_CLOSE = re.compile(r'\n?[ \t]*```\s*$')
_HEADING = re.compile(r'^#+\s*')
_CLOSERS = {'{': '}', '[': ']'}


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around the whole text."""
    text = text.strip()
    if _FENCE_OPEN.match(text):
        text = _FENCE_OPEN.sub('', text, count=1)
        text = _FENCE_CLOSE.sub('', text, count=1)
    return text.strip()


def _balanced_regions(text: str) -> list[tuple[int, int]]:
    """(start, end) of every balanced {...}/[...] region, found in one pass.

    Double-quoted strings are skipped while inside a region. A mismatched
    closer discards every region still open.
    """
    regions = []
    stack = []
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch in _CLOSERS:
            stack.append(i)
        elif ch in '}]':
            if not stack:
                continue
            start = stack.pop()
            if _CLOSERS[text[start]] != ch:
                stack.clear()
                continue
            regions.append((start, i + 1))
        elif ch == '"' and stack:
            in_string = True
    return sorted(regions)


def find_json_region(text: str, accept=None):
    """Return the first balanced {...} or [...] region that parses as JSON.

    When `accept` is given, regions whose parsed value it rejects are
    skipped as well.

    Best-effort heuristic: only the first MAX_SCAN_LENGTH characters are
    scanned, and candidates that do not parse are skipped.
    """
    text = text[:MAX_SCAN_LENGTH]
    for start, end in _balanced_regions(text):
        try:
            data = json.loads(text[start:end])
        except json.JSONDecodeError:
            continue
        if accept is None or accept(data):
            return data
    return None


def _load_json(text: str):
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return find_json_region(text)


def _commit_items(data) -> list | None:
    if isinstance(data, list):
        return data
    if not isinstance(data, dict):
        return None
    if isinstance(data.get(COMMIT_ENVELOPE_KEY), list):
        return data[COMMIT_ENVELOPE_KEY]
    if 'title' in data:
        return [data]
    # Models sometimes rename the envelope; take the first list they used
    for value in data.values():
        if isinstance(value, list):
            return value
    return None


def _is_commit_payload(data) -> bool:
    """Whether JSON found inside prose has the shape of a commit reply."""
    if isinstance(data, dict):
        return isinstance(data.get(COMMIT_ENVELOPE_KEY), list) or 'title' in data
    if isinstance(data, list):
        return bool(data) and all(isinstance(item, dict) and 'title' in item for item in data)
    return False


def _to_candidate(item) -> Candidate | None:
    if isinstance(item, str):
        title, value = item, ""
    elif isinstance(item, dict):
        title = item.get('title')
        value = item.get('value')
        if not isinstance(title, str):
            return None
        if not isinstance(value, str):
            value = ""
    else:
        return None

    title = title.strip()
    if not title:
        return None
    return Candidate(title=title, value=value.strip())


def parse_commit_reply(text: str) -> list[Candidate]:
    """Parse a commit-mode reply.

    Replies that are not JSON at all degrade to one candidate holding the
    whole text as its title.
    """
    cleaned = strip_code_fences(text)
    try:
        data, strict = json.loads(cleaned), True
    except json.JSONDecodeError:
        # Bracketed text in a prose reply is part of the message, not a payload
        data, strict = find_json_region(cleaned, accept=_is_commit_payload), False

    items = _commit_items(data)
    if items is not None:
        candidates = [c for c in map(_to_candidate, items) if c is not None]
        dropped = len(items) - len(candidates)
        if dropped:
            logger.debug("Dropped %d commit candidate(s) without a title", dropped)
        # JSON found inside prose that yields nothing was not the reply's payload
        if candidates or strict:
            return candidates

    logger.debug("Commit reply is not JSON, using the raw text as a single candidate")
    return [Candidate(title=cleaned, value="")] if cleaned else []


def sanitize_review_reply(text: str) -> list[Candidate]:
    """Turn a markdown review into exactly one candidate."""
    cleaned = strip_code_fences(text)
    lines = cleaned.split('\n')

    for i, line in enumerate(lines):
        title = _HEADING.sub('', line.strip()).strip()
        if title:
            body = '\n'.join(lines[i + 1:]).strip()
            return [Candidate(title=title, value=body)]

    return [Candidate(title=REVIEW_FALLBACK_TITLE, value="")]


def parse_reply(text: str, mode: str) -> list[Candidate]:
    """Dispatch on request mode; an empty result is an error."""
    if mode == REVIEW:
        candidates = sanitize_review_reply(text)
    else:
        candidates = parse_commit_reply(text)
    if not candidates:
        raise MalformedResponseError("No usable commit message in response")
    return candidates


def unknown_error_payload() -> dict:
    return {"error": {"message": UNKNOWN_ERROR_MESSAGE}}


def is_unknown_error(payload: dict) -> bool:
    return payload == unknown_error_payload()


def extract_json_from_error(text: str) -> dict:
    """Best-effort structured error from a backend error body.

    Strict JSON first, then the first balanced JSON region inside prose,
    then a generic "Unknown error" structure. Never raises.
    """
    data = _load_json(text.strip()) if text else None
    if isinstance(data, dict):
        return data
    if isinstance(data, list):
        return {"errors": data}
    return unknown_error_payload()


def error_message_from_payload(payload: dict) -> str | None:
    """Pull a human-readable message out of the common error body shapes."""
    error = payload.get('error', payload.get('detail'))
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and isinstance(error.get('message'), str):
        return error['message']
    if isinstance(payload.get('message'), str):
        return payload['message']
    errors = payload.get('errors')
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and isinstance(first.get('message'), str):
            return first['message']
        if isinstance(first, str):
            return first
    return None
