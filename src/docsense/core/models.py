"""Pydantic models for extraction output and transaction enrichment."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TaxType(str, Enum):
    """Type of tax applied on a document."""

    VAT = "vat"
    SALES_TAX = "sales_tax"
    GST = "gst"
    WITHHOLDING_TAX = "withholding_tax"
    SERVICE_TAX = "service_tax"
    EXCISE_TAX = "excise_tax"
    REVERSE_CHARGE = "reverse_charge"
    CUSTOM_TAX = "custom_tax"


class DocumentType(str, Enum):
    """Type of document."""

    INVOICE = "invoice"
    RECEIPT = "receipt"
    EXPENSE = "expense"
    OTHER = "other"


class LineItem(BaseModel):
    """Single line of an invoice or receipt."""

    description: str | None = Field(default=None, description="Description of the item")
    quantity: float | None = Field(default=None, description="Quantity of items")
    unit_price: float | None = Field(default=None, description="Price per unit")
    total_price: float | None = Field(default=None, description="Total price for this line item")


class DocumentExtraction(BaseModel):
    """
    Structured data extracted from an invoice or receipt.

    Range expectations (positive total, 3-letter currency, tax rate 0-100) are
    scored by the quality check, not enforced by the schema.
    """

    # Vendor/Store information
    vendor_name: str | None = Field(
        default=None,
        description="Legal registered business name of the company issuing the document",
    )
    vendor_address: str | None = Field(default=None, description="Complete address of the vendor")
    website: str | None = Field(default=None, description="Root domain of the vendor")
    email: str | None = Field(default=None, description="Email address of the vendor")

    # Document identification
    invoice_number: str | None = Field(default=None, description="Invoice/receipt identifier")
    date: str | None = Field(default=None, description="Issue date in YYYY-MM-DD format")
    due_date: str | None = Field(default=None, description="Payment due date in YYYY-MM-DD format")

    # Financial information
    currency: str = Field(..., description="Three-letter ISO 4217 currency code")
    total_amount: float = Field(..., description="Final total amount of the document")
    subtotal_amount: float | None = Field(default=None, description="Subtotal before tax")
    tax_amount: float | None = Field(default=None, description="Tax/VAT/PDV amount")
    tax_rate: float | None = Field(default=None, description="Tax rate percentage (20 for 20%)")
    tax_type: TaxType | None = Field(default=None)

    document_type: DocumentType = Field(...)

    # Customer information
    customer_name: str | None = Field(default=None, description="Name of the customer/buyer")
    customer_address: str | None = Field(default=None, description="Address of the customer")

    line_items: list[LineItem] = Field(default_factory=list)

    # Payment information
    payment_method: str | None = Field(default=None, description="bank_transfer, credit_card, cash, etc.")
    iban: str | None = Field(default=None)
    reference_number: str | None = Field(default=None, description="Payment reference number")

    notes: str | None = None
    language: str | None = Field(default=None, description="Document language (english, serbian, ...)")


class EnrichmentTarget(BaseModel):
    """Transaction as read from the caller's store. Never mutated here."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    description: str | None = None
    notes: str | None = None
    reference: str | None = None
    amount: float
    currency: str | None = None
    merchant_name: str | None = Field(default=None, alias="merchantName")
    vendor_name: str | None = Field(default=None, alias="vendorName")
    category_slug: str | None = Field(default=None, alias="categorySlug")


class TransactionData(BaseModel):
    """Transaction condensed into a single prompt line."""

    description: str
    amount: str
    currency: str


class EnrichmentOutcome(BaseModel):
    """Model proposal for one transaction."""

    model_config = ConfigDict(populate_by_name=True)

    merchant: str | None = Field(default=None, description="Legal entity name of the merchant")
    category: str | None = Field(default=None, description="Category slug from the taxonomy")
    merchant_confidence: float = Field(default=0.0, ge=0.0, le=1.0, alias="merchantConfidence")
    category_confidence: float = Field(default=0.0, ge=0.0, le=1.0, alias="categoryConfidence")


class BatchEnrichment(BaseModel):
    """Wrapper object returned by batched enrichment calls."""

    results: list[EnrichmentOutcome] = Field(default_factory=list)


@dataclass
class UpdateData:
    """Field updates that passed the confidence gates."""

    merchant_name: str | None = None
    category_slug: str | None = None

    @property
    def has_updates(self) -> bool:
        return bool(self.merchant_name or self.category_slug)


class EnrichmentProcessResult(BaseModel):
    """Outcome of enrichment for a single transaction."""

    transaction_id: str
    merchant_name: str | None = None
    category_slug: str | None = None
    updated: bool = False
    error: str | None = None


class BatchEnrichmentStats(BaseModel):
    """Aggregate counters over processed enrichment results."""

    total_processed: int = 0
    updates_applied: int = 0
    merchants_updated: int = 0
    categories_updated: int = 0
    no_update_needed: int = 0
    errors: int = 0


class EnrichmentRun(BaseModel):
    """Result of enriching a full list of transactions batch by batch."""

    results: list[EnrichmentProcessResult] = Field(default_factory=list)
    stats: BatchEnrichmentStats = Field(default_factory=BatchEnrichmentStats)
    batches: int = 0
