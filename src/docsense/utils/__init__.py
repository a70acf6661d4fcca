"""Utility modules."""

from .batching import chunk, process_sequentially
from .file_handlers import Attachment, build_attachment

__all__ = ["Attachment", "build_attachment", "chunk", "process_sequentially"]
