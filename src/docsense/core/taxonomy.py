"""Closed category taxonomy used by transaction enrichment."""

from dataclasses import dataclass

UNCATEGORIZED = "uncategorized"
OTHER = "other"


@dataclass(frozen=True)
class Category:
    """Transaction category shown to the model."""

    slug: str
    hint: str


TRANSACTION_CATEGORIES: tuple[Category, ...] = (
    Category("software", "SaaS tools (Slack, Google Workspace, GitHub, AWS, Azure)"),
    Category("travel", "Business trips (airlines, hotels, Uber, Bolt)"),
    Category("meals", "Business dining (restaurants, catering)"),
    Category("office-supplies", "Stationery, consumables"),
    Category("equipment", "Computers, furniture, tools >$500"),
    Category("utilities", "Electric, water, gas, internet bills"),
    Category("rent", "Office space, co-working"),
    Category("marketing", "Marketing services, SEO, agencies"),
    Category("advertising", "Ad platforms (Google Ads, Facebook Ads)"),
    Category("insurance", "Business insurance premiums"),
    Category("professional-services", "Legal, accounting, consulting"),
    Category("contractors", "Freelancer payments"),
    Category("bank-fees", "Bank charges, processing fees"),
    Category("taxes", "Tax payments, VAT/PDV"),
    Category("salaries", "Payroll, wages"),
    Category("training", "Courses, certifications"),
    Category("shipping", "Shipping and delivery costs"),
    Category("internet-and-telephone", "ISP, phone bills"),
    Category("income", "Payment received, revenue"),
    Category("sales", "Product/service sales"),
    Category("refunds-received", "Refunds from vendors"),
    Category(UNCATEGORIZED, "Use when uncertain"),
    Category(OTHER, "Miscellaneous"),
)

CATEGORY_SLUGS: frozenset[str] = frozenset(c.slug for c in TRANSACTION_CATEGORIES)


def is_valid_category(slug: str | None) -> bool:
    """Check that a slug belongs to the closed taxonomy."""
    return slug is not None and slug in CATEGORY_SLUGS
