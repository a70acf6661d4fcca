"""Tests for attachment preparation."""

import base64
from unittest.mock import patch

import pytest

from docsense.utils.file_handlers import Attachment, build_attachment, normalize_mime_type


class TestBuildAttachment:
    """Test cases for build_attachment."""

    def test_accepts_supported_type(self):
        attachment = build_attachment(b"\xff\xd8\xff\xe0jpeg", "image/jpeg")

        assert attachment == Attachment(data=b"\xff\xd8\xff\xe0jpeg", mime_type="image/jpeg")

    def test_resolves_aliases_and_parameters(self):
        attachment = build_attachment(b"%PDF-1.7", "Application/X-PDF; charset=binary")

        assert attachment.mime_type == "application/pdf"

    def test_sniffs_generic_mime_type(self):
        with patch("docsense.utils.file_handlers.sniff_mime_type", return_value="image/png") as sniff:
            attachment = build_attachment(b"\x89PNG\r\n", "application/octet-stream")

        sniff.assert_called_once()
        assert attachment.mime_type == "image/png"

    def test_sniffs_missing_mime_type(self):
        with patch("docsense.utils.file_handlers.sniff_mime_type", return_value="application/pdf"):
            attachment = build_attachment(b"%PDF-1.4", None)

        assert attachment.mime_type == "application/pdf"

    def test_rejects_empty_content(self):
        with pytest.raises(ValueError, match="empty"):
            build_attachment(b"", "application/pdf")

    def test_rejects_oversize_content(self):
        with pytest.raises(ValueError, match="exceeds maximum"):
            build_attachment(b"x" * 11, "application/pdf", max_size_bytes=10)

    def test_rejects_unsupported_type(self):
        with pytest.raises(ValueError, match="Unsupported document type: text/csv"):
            build_attachment(b"a,b,c", "text/csv")


class TestAttachment:
    """Test cases for Attachment encoding."""

    def test_data_url(self):
        attachment = Attachment(data=b"hello", mime_type="image/png")

        assert attachment.base64_data == base64.b64encode(b"hello").decode("ascii")
        assert attachment.data_url == f"data:image/png;base64,{attachment.base64_data}"

    def test_normalize_mime_type(self):
        assert normalize_mime_type("IMAGE/JPG") == "image/jpeg"
        assert normalize_mime_type(None) == ""
