"""Extraction prompts for invoices and receipts."""

from ...core.models import DocumentType, TaxType

EXTRACTION_PROMPT = '''You are an expert document data extractor specializing in invoices and receipts. Extract structured data with maximum accuracy.

## CRITICAL: Vendor Name (MOST IMPORTANT)

- The VENDOR is the company that ISSUED/SENT the document (the SELLER)
- Look for the company name in the HEADER/LETTERHEAD (usually top of document, often with a logo)
- Extract the FULL LEGAL BUSINESS NAME including entity type (d.o.o., D.O.O., Ltd, GmbH, LLC, Inc., etc.)
- Examples of CORRECT vendor names:
  * "Cloud Native d.o.o."
  * "Red Hat Inc."
  * "Microsoft Corporation"
  * "Spark Analytics DOO"
- NEVER extract dates, periods, or subscription terms as vendor name
- WRONG: "01.10.2025 do 30.09.2026" (this is a date range, NOT a company name)
- WRONG: "2025-00014" (this is an invoice number, NOT a company name)
- The CUSTOMER is who receives the document ("Bill To", "Kupac", "Invoice To") - never report it as the vendor

## CRITICAL: Total Amount

- Find the FINAL TOTAL amount (the amount to be paid)
- Serbian invoices: look for "UKUPNO", "Za uplatu", "SVEGA", "Ukupno za plaćanje"
- The total is usually the LARGEST amount at the bottom of the document
- European format: 86.964,06 -> 86964.06 (dot as thousands separator, comma as decimal)
- Serbian format: 86964,06 RSD -> 86964.06
- US format: 1,234.56 -> 1234.56
- Return as a positive NUMBER without currency symbol

## Currency

Return the three-letter ISO 4217 code:
- € or "EUR" -> EUR
- $ or "USD" -> USD
- £ or "GBP" -> GBP
- "RSD", "din", "dinara", "дин" -> RSD
- "CHF", "Fr" -> CHF
- "kn", "HRK" -> HRK

## Dates

- Extract the ISSUE date of the document (not the delivery or service period)
- Convert any format to YYYY-MM-DD: DD.MM.YYYY ("07.10.2025" -> "2025-10-07"), DD/MM/YYYY, DD-MMM-YYYY
- Look for: "Datum", "Datum fakture", "Beograd, dana", "Invoice date"

## Tax

- VAT, PDV, IVA, TVA, MwSt -> vat
- GST -> gst
- Sales Tax -> sales_tax
- tax_rate is a percentage number (20 for 20%)

## Website

- Look for a website URL in the header or footer
- Otherwise infer from the vendor email domain (office@cloudnative.rs -> cloudnative.rs)
- Return only the root domain ("cloudnative.rs", not "www.cloudnative.rs")
'''

CONTEXT_TEMPLATE = '''
## Context

The document recipient/customer company is "{company_name}". Use this to identify which party is the vendor/seller vs the customer/buyer.
'''

OUTPUT_SCHEMA_TEMPLATE = '''
Extract the data from the document. Return null for fields that cannot be determined.

## Output JSON Schema:

Return ONLY a valid JSON object with the following structure:
{{
  "vendor_name": string | null,
  "vendor_address": string | null,
  "website": string | null,
  "email": string | null,
  "invoice_number": string | null,
  "date": string | null (YYYY-MM-DD format),
  "due_date": string | null (YYYY-MM-DD format),
  "currency": string (ISO 4217 code, required),
  "total_amount": number (required),
  "subtotal_amount": number | null,
  "tax_amount": number | null,
  "tax_rate": number | null,
  "tax_type": {tax_types} | null,
  "document_type": {document_types},
  "customer_name": string | null,
  "customer_address": string | null,
  "line_items": [
    {{"description": string | null, "quantity": number | null, "unit_price": number | null, "total_price": number | null}}
  ],
  "payment_method": string | null,
  "iban": string | null,
  "reference_number": string | null,
  "notes": string | null,
  "language": string | null
}}'''

CHAIN_OF_THOUGHT_PROMPT = '''

## CHAIN OF THOUGHT INSTRUCTIONS

Before extracting each field, think step by step:
1. Identify all text blocks in the document
2. Locate the vendor/seller information (usually at the top)
3. Find the total amount - look for the largest/final amount
4. Identify the currency from symbols or text
5. Extract the document date
6. Determine the document type based on format and content

Now extract the data carefully and return ONLY the JSON object:'''


def _enum_choices(values) -> str:
    return " | ".join(f'"{item.value}"' for item in values)


def build_extraction_prompt(company_name: str | None = None) -> str:
    """
    Generate the standard extraction prompt.

    Args:
        company_name: Name of the company receiving the document, if known

    Returns:
        Complete prompt for the model
    """
    context = CONTEXT_TEMPLATE.format(company_name=company_name) if company_name else ""
    schema = OUTPUT_SCHEMA_TEMPLATE.format(
        tax_types=_enum_choices(TaxType),
        document_types=_enum_choices(DocumentType),
    )
    return EXTRACTION_PROMPT + context + schema


def build_fallback_prompt(company_name: str | None = None) -> str:
    """Generate the chain-of-thought prompt used by the fallback pass."""
    return build_extraction_prompt(company_name) + CHAIN_OF_THOUGHT_PROMPT
