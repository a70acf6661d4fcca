"""LLM prompts for extraction and enrichment."""

from .enrichment import ENRICHMENT_PROMPT, build_enrichment_prompt, needs_categories
from .extraction import EXTRACTION_PROMPT, build_extraction_prompt, build_fallback_prompt

__all__ = [
    "ENRICHMENT_PROMPT",
    "EXTRACTION_PROMPT",
    "build_enrichment_prompt",
    "build_extraction_prompt",
    "build_fallback_prompt",
    "needs_categories",
]
