"""Core module - models and taxonomy."""

from .models import (
    BatchEnrichment,
    BatchEnrichmentStats,
    DocumentExtraction,
    DocumentType,
    EnrichmentOutcome,
    EnrichmentProcessResult,
    EnrichmentRun,
    EnrichmentTarget,
    LineItem,
    TaxType,
    TransactionData,
    UpdateData,
)
from .taxonomy import CATEGORY_SLUGS, TRANSACTION_CATEGORIES, UNCATEGORIZED, is_valid_category

__all__ = [
    "BatchEnrichment",
    "BatchEnrichmentStats",
    "CATEGORY_SLUGS",
    "DocumentExtraction",
    "DocumentType",
    "EnrichmentOutcome",
    "EnrichmentProcessResult",
    "EnrichmentRun",
    "EnrichmentTarget",
    "LineItem",
    "TRANSACTION_CATEGORIES",
    "TaxType",
    "TransactionData",
    "UNCATEGORIZED",
    "UpdateData",
    "is_valid_category",
]
