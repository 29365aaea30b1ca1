"""Error Classification - one taxonomy and one display line for every backend."""

import logging
import re

from aic2.errors import ClassifiedError, LLMError, UNKNOWN
from aic2.llm.models import DisplayItem

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "An unknown error occurred"

_NEWLINES = re.compile(r'\s*[\r\n]+\s*')


def single_line(text: str) -> str:
    return _NEWLINES.sub(' ', text).strip()


def classify(exc: BaseException) -> ClassifiedError:
    """Map any pipeline exception to a ClassifiedError."""
    kind = exc.kind if isinstance(exc, LLMError) else UNKNOWN
    message = single_line(str(exc)) or DEFAULT_ERROR_MESSAGE
    logger.debug("Request failed (%s): %s", kind, message, exc_info=exc)
    return ClassifiedError(kind=kind, message=message, cause=exc)


def error_item(label: str, exc: BaseException) -> DisplayItem:
    """Terminal, non-selectable item that stands in for a failed request."""
    error = classify(exc)
    return DisplayItem(
        name=f"[{label}] {error.message}",
        short=error.message,
        value=error.message,
        is_error=True,
        disabled=True,
        error=error,
    )
