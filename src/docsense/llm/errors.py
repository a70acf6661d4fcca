"""Errors raised while talking to the generative model."""


class DocumentAIError(Exception):
    """Base exception for model gateway errors."""


class ConfigurationError(DocumentAIError):
    """Raised when no model credential is configured."""


class UpstreamError(DocumentAIError):
    """Raised when the model endpoint does not return a usable response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(DocumentAIError):
    """Raised when the response body is not well-formed JSON."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text[:500]


class ValidationError(DocumentAIError):
    """Raised when well-formed JSON does not match the expected schema."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


# Everything except a missing credential is worth another attempt
RETRYABLE_ERRORS: tuple[type[DocumentAIError], ...] = (UpstreamError, ParseError, ValidationError)
