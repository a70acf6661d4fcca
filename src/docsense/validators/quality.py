"""Quality scoring for extraction results."""

import re
from dataclasses import dataclass, field
from datetime import datetime

import pycountry

from ..core.models import DocumentExtraction

CRITICAL_FIELDS: tuple[str, ...] = ("total_amount", "currency", "vendor_name", "date")

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class QualityScore:
    """Derived quality of a single extraction attempt. Never persisted."""

    score: float
    missing_critical_fields: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)

    def is_acceptable(self, threshold: float) -> bool:
        """Good enough to skip the fallback pass."""
        return self.score >= threshold and not self.missing_critical_fields


def is_iso_date(value: str) -> bool:
    """Check for a real calendar date written as YYYY-MM-DD."""
    if not ISO_DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_known_currency(code: str) -> bool:
    return pycountry.currencies.get(alpha_3=code.upper()) is not None


class QualityScorer:
    """
    Score an extraction with a fixed deduction table.

    Starting from 100 points:

    - total_amount missing or <= 0: -25
    - currency missing: -20
    - vendor_name missing: -20
    - date missing: -15
    - currency code length != 3: -10
    - date not a valid YYYY-MM-DD date: -5
    - tax_rate outside [0, 100]: -5

    The final score is ``max(0, points) / 100``.
    """

    TOTAL_AMOUNT_PENALTY = 25
    CURRENCY_PENALTY = 20
    VENDOR_PENALTY = 20
    DATE_PENALTY = 15
    CURRENCY_LENGTH_PENALTY = 10
    DATE_FORMAT_PENALTY = 5
    TAX_RATE_PENALTY = 5

    def score(self, result: DocumentExtraction) -> QualityScore:
        """
        Compute the quality score of an extraction.

        Args:
            result: Extraction to score

        Returns:
            QualityScore with missing critical fields and soft issues
        """
        points = 100
        missing: list[str] = []
        issues: list[str] = []

        # Critical fields
        if not result.total_amount or result.total_amount <= 0:
            missing.append("total_amount")
            points -= self.TOTAL_AMOUNT_PENALTY

        if not result.currency:
            missing.append("currency")
            points -= self.CURRENCY_PENALTY

        if not result.vendor_name:
            missing.append("vendor_name")
            points -= self.VENDOR_PENALTY

        if not result.date:
            missing.append("date")
            points -= self.DATE_PENALTY

        # Soft issues
        if result.currency and len(result.currency) != 3:
            issues.append("Invalid currency code length")
            points -= self.CURRENCY_LENGTH_PENALTY
        elif result.currency and not is_known_currency(result.currency):
            # Reported only, no deduction
            issues.append(f"Unrecognized ISO 4217 currency code: {result.currency}")

        if result.date and not is_iso_date(result.date):
            issues.append("Date not in ISO format")
            points -= self.DATE_FORMAT_PENALTY

        if result.tax_rate is not None and not 0 <= result.tax_rate <= 100:
            issues.append("Invalid tax rate")
            points -= self.TAX_RATE_PENALTY

        return QualityScore(
            score=max(0, points) / 100,
            missing_critical_fields=missing,
            issues=issues,
        )


def compute_quality_score(result: DocumentExtraction) -> QualityScore:
    """Score an extraction with the default deduction table."""
    return QualityScorer().score(result)
