"""Extraction validators."""

from .consistency import ConsistencyValidator, ValidationResult
from .quality import CRITICAL_FIELDS, QualityScore, QualityScorer, compute_quality_score

__all__ = [
    "CRITICAL_FIELDS",
    "ConsistencyValidator",
    "QualityScore",
    "QualityScorer",
    "ValidationResult",
    "compute_quality_score",
]
