"""Attachment preparation for model calls."""

import base64
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

# MIME types the extraction models accept as inline data
SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/heic",
        "image/heif",
        "image/gif",
        "application/pdf",
    }
)

MIME_ALIASES: dict[str, str] = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
    "application/x-pdf": "application/pdf",
}


@dataclass(frozen=True)
class Attachment:
    """Binary payload sent alongside a prompt."""

    data: bytes
    mime_type: str

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    @property
    def data_url(self) -> str:
        """Inline data URL understood by OpenAI-compatible endpoints."""
        return f"data:{self.mime_type};base64,{self.base64_data}"


def sniff_mime_type(content: bytes) -> str:
    """
    Detect MIME type from file content using libmagic.

    Imported lazily so that callers passing an explicit MIME type never
    need libmagic installed.
    """
    import magic

    return magic.from_buffer(content, mime=True)


def normalize_mime_type(mime_type: str | None) -> str:
    """Lower-case a MIME type, drop parameters and resolve common aliases."""
    value = (mime_type or "").split(";", 1)[0].strip().lower()
    return MIME_ALIASES.get(value, value)


def build_attachment(
    content: bytes,
    mime_type: str | None,
    max_size_bytes: int = 20 * 1024 * 1024,
) -> Attachment:
    """
    Validate uploaded bytes and wrap them as a model attachment.

    Args:
        content: Raw file bytes
        mime_type: MIME type reported by the caller (may be generic or missing)
        max_size_bytes: Maximum accepted payload size

    Returns:
        Attachment ready to be sent to the model

    Raises:
        ValueError: If the file is empty, too large, or of an unsupported type
    """
    if not content:
        raise ValueError("Document is empty")

    if len(content) > max_size_bytes:
        raise ValueError(
            f"File size {len(content)} bytes exceeds maximum "
            f"{max_size_bytes} bytes"
        )

    resolved = normalize_mime_type(mime_type)
    if resolved in GENERIC_MIME_TYPES:
        resolved = normalize_mime_type(sniff_mime_type(content))
        logger.debug(f"Detected MIME type {resolved} from content")

    if resolved not in SUPPORTED_MIME_TYPES:
        raise ValueError(f"Unsupported document type: {resolved or 'unknown'}")

    return Attachment(data=content, mime_type=resolved)
