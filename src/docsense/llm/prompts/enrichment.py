"""Enrichment prompt for merchant normalization and categorization."""

from collections.abc import Sequence

from ...core.models import EnrichmentTarget, TransactionData
from ...core.taxonomy import TRANSACTION_CATEGORIES

# (aliases as seen on statements, legal entity name)
GLOBAL_LEGAL_ENTITIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Anthropic", "ANTHROPIC"), "Anthropic Inc"),
    (("Google", "Google Pay", "GOOGLE*"), "Google LLC"),
    (("AMZN", "AMAZON", "AMZN MKTP"), "Amazon.com Inc"),
    (("AWS", "Amazon Web Services"), "Amazon Web Services Inc"),
    (("Starbucks", "STARBUCKS #1234"), "Starbucks Corporation"),
    (("MSFT", "Microsoft", "MSFT*Office365"), "Microsoft Corporation"),
    (("Apple", "APPLE STORE", "Apple.com"), "Apple Inc"),
    (("GitHub", "GITHUB"), "GitHub Inc"),
    (("Slack", "SLACK*"), "Slack Technologies Inc"),
    (("Notion", "NOTION"), "Notion Labs Inc"),
    (("Figma", "FIGMA"), "Figma Inc"),
    (("Zoom", "ZOOM.US"), "Zoom Video Communications Inc"),
    (("Dropbox", "DROPBOX"), "Dropbox Inc"),
    (("Atlassian", "JIRA", "CONFLUENCE"), "Atlassian Corporation"),
    (("Adobe", "ADOBE*"), "Adobe Inc"),
    (("Spotify", "SPOTIFY"), "Spotify AB"),
    (("Netflix", "NETFLIX"), "Netflix Inc"),
    (("Uber", "UBER*"), "Uber Technologies Inc"),
    (("Bolt", "BOLT"), "Bolt Technology OÜ"),
    (("OpenAI", "OPENAI"), "OpenAI Inc"),
    (("Vercel", "VERCEL"), "Vercel Inc"),
    (("Railway",), "Railway Corporation"),
    (("DigitalOcean", "DIGITALOCEAN"), "DigitalOcean LLC"),
    (("Cloudflare", "CLOUDFLARE"), "Cloudflare Inc"),
    (("Stripe", "STRIPE*"), "Stripe Inc"),
    (("PayPal", "PAYPAL*"), "PayPal Holdings Inc"),
    (("LinkedIn", "LINKEDIN"), "LinkedIn Corporation"),
)

BALKAN_LEGAL_ENTITIES: tuple[tuple[str, str], ...] = (
    ("TELEKOM SRBIJA", "Telekom Srbija a.d."),
    ("HEP", "Hrvatska elektroprivreda d.d."),
    ("INA", "INA d.d."),
    ("KONZUM", "Konzum d.d."),
    ("LIDL HR / LIDL RS", "Lidl Hrvatska d.o.o. / Lidl Srbija d.o.o."),
    ("DM DROGERIE", "dm-drogerie markt d.o.o."),
    ("GLOVO", "Glovoapp Technology d.o.o."),
    ("WOLT", "Wolt Hrvatska d.o.o. / Wolt Srbija d.o.o."),
)

ENRICHMENT_PROMPT = '''You are a legal entity identification system for business expense transactions, specializing in global companies including US, EU, and Balkan region (Serbia, Croatia, Slovenia, Bosnia).

TASK: For EVERY transaction, identify the formal legal business entity name with proper entity suffixes.

INPUT HIERARCHY (use in this priority order):
1. "Current Merchant": Existing name from provider -> enhance to legal entity
2. "Vendor": Known vendor name -> identify legal entity
3. "Raw": Transaction description -> extract legal entity

GLOBAL TECH COMPANIES - ALWAYS USE THESE EXACT NAMES:
{global_entities}

BALKAN REGION COMPANIES (Serbia, Croatia, Slovenia, Bosnia):
- Use "d.o.o." for limited liability companies (društvo s ograničenom odgovornošću)
- Use "d.d." for joint stock companies (dioničko društvo)
- Use "s.p." for sole proprietors (samostalni poduzetnik)
{balkan_entities}

EUROPEAN COMPANIES:
- Germany: GmbH (limited), AG (joint stock)
- Austria: GmbH, AG
- France: S.A., S.A.R.L.
- Italy: S.r.l., S.p.A.
- Netherlands: B.V., N.V.

REQUIREMENTS:
- ALWAYS use official legal entity suffixes: Inc, LLC, Corp, Ltd, Co, d.o.o., d.d., GmbH, AG, etc.
- Prefer parent company's legal entity (Google LLC, not Google Pay LLC)
- Remove location codes, store numbers (#1234), transaction IDs, and timestamps
- Clean up ALL CAPS to proper capitalization
- If genuinely unknown, provide best cleaned/capitalized version available

CONFIDENCE SCORING:
- categoryConfidence: Rate your confidence in the category assignment (0-1)
  • 1.0 = Very certain (e.g., "Slack" -> software)
  • 0.8 = Quite confident (e.g., "Hotel booking" -> travel)
  • 0.5 = Unsure (e.g., ambiguous merchant)
  • 0.2 = Very uncertain
- merchantConfidence: Rate your confidence in the merchant name (0-1)
  • 1.0 = Official company name found
  • 0.8 = Strong match with known entity
  • 0.5 = Best guess from available info
  • 0.2 = Very uncertain
- Only return category if confidence >= 0.7, otherwise return null
{category_section}
{return_instructions}
Respond with a JSON object of the form:
{{"results": [{{"merchant": string | null, "category": string | null, "merchantConfidence": number, "categoryConfidence": number}}]}}

Transactions to process:
{transaction_list}

Return exactly {count} results in order. Apply the transformation rules consistently.'''

CATEGORY_SECTION = '''
CATEGORIZATION RULES:
Assign categories based on merchant name and business purpose. Only return category if confidence >= 0.7, otherwise return null.

CONFIDENCE EXAMPLES:
• "Slack Technologies" -> software (0.95) ✅
• "Delta Air Lines" -> travel (0.95) ✅
• "ConEd Electric" -> utilities (0.90) ✅
• "ABC Corp payment" -> null (0.4) ❌ Too uncertain

COMMON CATEGORIES (only use if confident):
{categories}

RULES:
1. Only categorize if confidence >= 0.7
2. When uncertain, return null for category
3. Focus on merchant name for clues
4. Consider business context and amount
'''


def _format_global_entities() -> str:
    lines = []
    for aliases, legal_name in GLOBAL_LEGAL_ENTITIES:
        quoted = " / ".join(f'"{alias}"' for alias in aliases)
        lines.append(f'✓ {quoted} -> "{legal_name}"')
    return "\n".join(lines)


def _format_balkan_entities() -> str:
    return "\n".join(f'✓ "{raw}" -> "{legal}"' for raw, legal in BALKAN_LEGAL_ENTITIES)


def _format_transaction_list(
    transaction_data: Sequence[TransactionData],
    batch: Sequence[EnrichmentTarget],
) -> str:
    lines = []
    for index, tx in enumerate(transaction_data):
        line = f'{index + 1}. Description: "{tx.description}", Amount: {tx.amount}, Currency: {tx.currency}'
        transaction = batch[index] if index < len(batch) else None
        if transaction is not None:
            if transaction.merchant_name:
                line += f" (Current Merchant: {transaction.merchant_name})"
            elif transaction.vendor_name:
                line += f" (Vendor: {transaction.vendor_name})"
        lines.append(line)
    return "\n".join(lines)


def needs_categories(batch: Sequence[EnrichmentTarget]) -> bool:
    """Whether any transaction in the batch still lacks a category."""
    return any(not tx.category_slug for tx in batch)


def build_enrichment_prompt(
    transaction_data: Sequence[TransactionData],
    batch: Sequence[EnrichmentTarget],
) -> str:
    """
    Generate the batched enrichment prompt.

    Categorization rules are only included when at least one transaction
    in the batch has no category yet.

    Args:
        transaction_data: Prepared prompt lines, one per transaction
        batch: Original transactions in the same order

    Returns:
        Complete prompt for the model
    """
    with_categories = needs_categories(batch)

    if with_categories:
        categories = "\n".join(f"• {c.slug}: {c.hint}" for c in TRANSACTION_CATEGORIES)
        category_section = CATEGORY_SECTION.format(categories=categories)
        return_instructions = (
            "Return:\n"
            "1. Legal entity name: Apply the transformation rules above\n"
            "2. Category: Select the best-fit category from the allowed list\n"
        )
    else:
        category_section = ""
        return_instructions = "Return:\nLegal entity name: Apply the transformation rules above\n"

    return ENRICHMENT_PROMPT.format(
        global_entities=_format_global_entities(),
        balkan_entities=_format_balkan_entities(),
        category_section=category_section,
        return_instructions=return_instructions,
        transaction_list=_format_transaction_list(transaction_data, batch),
        count=len(batch),
    )
