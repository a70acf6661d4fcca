"""Cross-field consistency checks for extraction results."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from ..core.models import DocumentExtraction
from .quality import is_iso_date


@dataclass
class ValidationResult:
    """Result of validation check."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge two validation results."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )


def _decimal(value: float | None) -> Decimal | None:
    return None if value is None else Decimal(str(value))


class ConsistencyValidator:
    """
    Check that the numbers and dates of an extraction agree with each other.

    Receipts and invoices print amounts in many styles (tax-inclusive lines,
    tax at the bottom), so mismatches are reported as warnings only. The
    extraction itself is never modified.
    """

    # Absolute tolerance for rounding (2 cents)
    ABSOLUTE_TOLERANCE = Decimal("0.02")

    # Relative tolerance for larger amounts (1%)
    RELATIVE_TOLERANCE = 0.01

    def validate(self, doc: DocumentExtraction) -> ValidationResult:
        """
        Validate all cross-field relationships of the extraction.

        Args:
            doc: Extraction to validate

        Returns:
            ValidationResult with any warnings found
        """
        result = ValidationResult(is_valid=True)
        result = result.merge(self._validate_line_items(doc))
        result = result.merge(self._validate_line_sum(doc))
        result = result.merge(self._validate_grand_total(doc))
        result = result.merge(self._validate_dates(doc))
        return result

    def _validate_line_items(self, doc: DocumentExtraction) -> ValidationResult:
        """Check quantity x unit price against each line total."""
        warnings = []

        for number, item in enumerate(doc.line_items, start=1):
            quantity = _decimal(item.quantity)
            unit_price = _decimal(item.unit_price)
            line_total = _decimal(item.total_price)
            if quantity is None or unit_price is None or line_total is None:
                continue

            expected = quantity * unit_price
            if not self._is_close(line_total, expected):
                warnings.append(
                    f"Line {number}: Total {line_total} doesn't match "
                    f"qty × price ({expected:.2f})"
                )

        return ValidationResult(is_valid=True, warnings=warnings)

    def _validate_line_sum(self, doc: DocumentExtraction) -> ValidationResult:
        """Sum of line totals should match the subtotal or the grand total."""
        totals = [_decimal(item.total_price) for item in doc.line_items]
        totals = [t for t in totals if t is not None]
        if not totals:
            return ValidationResult(is_valid=True)

        line_sum = sum(totals, Decimal("0"))
        candidates = [
            value
            for value in (_decimal(doc.subtotal_amount), _decimal(doc.total_amount))
            if value is not None and value > 0
        ]
        if candidates and not any(self._is_close(line_sum, c) for c in candidates):
            return ValidationResult(
                is_valid=True,
                warnings=[
                    f"Sum of line items {line_sum:.2f} matches neither subtotal "
                    f"({doc.subtotal_amount}) nor total ({doc.total_amount})"
                ],
            )
        return ValidationResult(is_valid=True)

    def _validate_grand_total(self, doc: DocumentExtraction) -> ValidationResult:
        """Validate grand total = subtotal + tax."""
        subtotal = _decimal(doc.subtotal_amount)
        tax = _decimal(doc.tax_amount)
        if subtotal is None or tax is None:
            return ValidationResult(is_valid=True)

        expected_total = subtotal + tax
        total = _decimal(doc.total_amount)
        if not self._is_close(total, expected_total):
            return ValidationResult(
                is_valid=True,
                warnings=[
                    f"Grand total mismatch: Document shows {doc.total_amount}, "
                    f"but subtotal ({doc.subtotal_amount}) + tax ({doc.tax_amount}) = {expected_total:.2f}"
                ],
            )
        return ValidationResult(is_valid=True)

    def _validate_dates(self, doc: DocumentExtraction) -> ValidationResult:
        """Due date must not precede the issue date."""
        if not (doc.date and doc.due_date):
            return ValidationResult(is_valid=True)
        if not (is_iso_date(doc.date) and is_iso_date(doc.due_date)):
            return ValidationResult(is_valid=True)

        issued = datetime.strptime(doc.date, "%Y-%m-%d")
        due = datetime.strptime(doc.due_date, "%Y-%m-%d")
        if due < issued:
            return ValidationResult(
                is_valid=True,
                warnings=[f"Due date {doc.due_date} is before issue date {doc.date}"],
            )
        return ValidationResult(is_valid=True)

    def _is_close(self, a: Decimal, b: Decimal) -> bool:
        """
        Check if two decimal values are close enough.

        Uses both relative and absolute tolerance.
        """
        diff = abs(a - b)

        # Check absolute tolerance first (for small amounts)
        if diff <= self.ABSOLUTE_TOLERANCE:
            return True

        # Check relative tolerance
        max_val = max(abs(a), abs(b))
        if max_val > 0:
            relative_diff = diff / max_val
            return float(relative_diff) <= self.RELATIVE_TOLERANCE

        return True
