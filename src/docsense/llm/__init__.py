"""Model gateway, retry policy and prompts."""

from .errors import (
    ConfigurationError,
    DocumentAIError,
    ParseError,
    UpstreamError,
    ValidationError,
)
from .gateway import ModelGateway, parse_model_output, strip_code_fences
from .retry import with_retry

__all__ = [
    "ConfigurationError",
    "DocumentAIError",
    "ModelGateway",
    "ParseError",
    "UpstreamError",
    "ValidationError",
    "parse_model_output",
    "strip_code_fences",
    "with_retry",
]
