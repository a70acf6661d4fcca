"""Caller entry points for document extraction and transaction enrichment."""

import logging
from collections.abc import Sequence

from .config import Settings, get_settings
from .core.enrichment import EnrichmentPipeline
from .core.models import (
    DocumentExtraction,
    EnrichmentProcessResult,
    EnrichmentRun,
    EnrichmentTarget,
)
from .core.pipeline import ExtractionPipeline
from .llm.gateway import ModelGateway

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging with the configured (or given) level."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )


async def extract(
    file_bytes: bytes,
    mime_type: str | None,
    company_name: str | None = None,
    *,
    settings: Settings | None = None,
) -> DocumentExtraction:
    """
    Extract structured data from an invoice or receipt.

    Args:
        file_bytes: Raw document bytes
        mime_type: MIME type of the document (sniffed when missing)
        company_name: Company the document was issued to
        settings: Optional configuration override

    Returns:
        Best available DocumentExtraction
    """
    pipeline = ExtractionPipeline(ModelGateway(settings or get_settings()))
    return await pipeline.extract(file_bytes, mime_type, company_name)


async def enrich(
    transactions: Sequence[EnrichmentTarget],
    *,
    settings: Settings | None = None,
) -> list[EnrichmentProcessResult]:
    """Enrich a single batch of transactions."""
    pipeline = EnrichmentPipeline(ModelGateway(settings or get_settings()))
    return await pipeline.enrich(transactions)


async def enrich_all(
    transactions: Sequence[EnrichmentTarget],
    *,
    settings: Settings | None = None,
) -> EnrichmentRun:
    """Enrich any number of transactions in sequential batches."""
    pipeline = EnrichmentPipeline(ModelGateway(settings or get_settings()))
    run = await pipeline.run(transactions)
    logger.info(f"Enriched {len(run.results)} transactions in {run.batches} batches")
    return run
