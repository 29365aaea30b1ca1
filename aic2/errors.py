"""Error taxonomy shared by prompt building, adapters and parsing."""

from dataclasses import dataclass


# ClassifiedError kind tags
NETWORK_UNREACHABLE = "network-unreachable"
CONNECTION_REFUSED = "connection-refused"
TIMEOUT = "timeout"
INVALID_MODEL = "invalid-model"
EMPTY_RESPONSE = "empty-response"
BACKEND_ERROR = "backend-error"
MALFORMED_BACKEND_ERROR = "malformed-backend-error"
CONFIGURATION = "configuration"
UNKNOWN = "unknown"


class LLMError(Exception):
    """Raised when any stage of a generation request fails."""
    kind = UNKNOWN


class ConfigurationError(LLMError):
    """Bad prompt override path or unusable provider settings."""
    kind = CONFIGURATION


class ValidationError(LLMError):
    """Request rejected before reaching the backend."""
    kind = INVALID_MODEL


class InvalidModelError(ConfigurationError, ValidationError):
    """Model is not in the allow-list or not returned by the live listing."""
    kind = INVALID_MODEL

    def __init__(self, backend: str, model: str):
        super().__init__(f"Invalid model type of {backend}: {model}")
        self.backend = backend
        self.model = model


class TransportError(LLMError):
    """DNS failure, refused connection or timeout."""

    def __init__(self, message: str, host: str = "", kind: str = NETWORK_UNREACHABLE):
        super().__init__(message)
        self.host = host
        self.kind = kind


class BackendError(LLMError):
    """Backend answered with an HTTP error status."""

    def __init__(self, message: str, status: int, payload: dict | None = None, malformed: bool = False):
        super().__init__(message)
        self.status = status
        self.payload = payload
        self.malformed = malformed
        self.kind = MALFORMED_BACKEND_ERROR if malformed else BACKEND_ERROR


class MalformedResponseError(LLMError):
    """A 200 response that carries no usable content."""
    kind = EMPTY_RESPONSE


@dataclass(frozen=True)
class ClassifiedError:
    """Normalized failure: kind tag plus a single-line display message."""
    kind: str
    message: str
    cause: BaseException | None = None
