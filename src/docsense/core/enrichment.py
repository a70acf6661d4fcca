"""Batched transaction enrichment: merchant normalization and categorization."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from ..config import Settings, get_settings
from ..llm.gateway import ModelGateway
from ..llm.prompts import build_enrichment_prompt
from ..llm.retry import with_retry
from ..utils.batching import process_sequentially
from .models import (
    BatchEnrichment,
    BatchEnrichmentStats,
    EnrichmentOutcome,
    EnrichmentProcessResult,
    EnrichmentRun,
    EnrichmentTarget,
    TransactionData,
    UpdateData,
)
from .taxonomy import UNCATEGORIZED, is_valid_category

logger = logging.getLogger(__name__)

MISSING_RESULT_ERROR = "Missing from AI results"
DEFAULT_CURRENCY = "EUR"


def _format_amount(amount: float) -> str:
    """Absolute amount as text, without a trailing ".0" for whole numbers."""
    value = abs(float(amount))
    return str(int(value)) if value.is_integer() else str(value)


def needs_enrichment(transaction: EnrichmentTarget) -> bool:
    """Whether a transaction still lacks a merchant name or a category."""
    return not transaction.merchant_name or not transaction.category_slug


def prepare_transaction_data(batch: Sequence[EnrichmentTarget]) -> list[TransactionData]:
    """
    Condense each transaction into a single description line.

    Priority: vendor name, raw description (if distinct from the vendor),
    notes (if distinct from both), reference (if distinct from the
    description). Amounts are sent as absolute values.
    """
    prepared = []
    for tx in batch:
        parts: list[str] = []

        if tx.vendor_name:
            parts.append(f"Vendor: {tx.vendor_name}")

        if tx.description and tx.description != tx.vendor_name:
            parts.append(f"Raw: {tx.description}")

        if tx.notes and tx.notes != tx.description and tx.notes != tx.vendor_name:
            parts.append(f"Notes: {tx.notes}")

        if tx.reference and tx.reference != tx.description:
            parts.append(f"Ref: {tx.reference}")

        description = (
            " | ".join(parts) if parts else tx.description or tx.notes or "Unknown transaction"
        )

        prepared.append(
            TransactionData(
                description=description,
                amount=_format_amount(tx.amount),
                currency=tx.currency or DEFAULT_CURRENCY,
            )
        )
    return prepared


def prepare_update_data(
    transaction: EnrichmentTarget,
    outcome: EnrichmentOutcome,
    merchant_threshold: float = 0.6,
    category_threshold: float = 0.7,
) -> UpdateData:
    """
    Turn a model proposal into confidence-gated field updates.

    Categories are only assigned to expenses (amount <= 0) that have no
    category yet. A rejected or missing category becomes ``uncategorized``
    so the category is never proposed again.
    """
    update = UpdateData()

    if outcome.merchant and outcome.merchant_confidence >= merchant_threshold:
        update.merchant_name = outcome.merchant

    if not transaction.category_slug and transaction.amount <= 0:
        if outcome.category_confidence >= category_threshold and is_valid_category(outcome.category):
            update.category_slug = outcome.category
        else:
            update.category_slug = UNCATEGORIZED

    return update


def calculate_enrichment_stats(results: Sequence[EnrichmentProcessResult]) -> BatchEnrichmentStats:
    """Calculate statistics from enrichment process results."""
    return BatchEnrichmentStats(
        total_processed=len(results),
        updates_applied=sum(1 for r in results if r.updated),
        merchants_updated=sum(1 for r in results if r.merchant_name),
        categories_updated=sum(1 for r in results if r.category_slug),
        no_update_needed=sum(1 for r in results if not r.updated and not r.error),
        errors=sum(1 for r in results if r.error),
    )


class EnrichmentPipeline:
    """Enrich transactions with legal merchant names and categories."""

    def __init__(
        self,
        gateway: ModelGateway | None = None,
        settings: Settings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.settings = settings or (gateway.settings if gateway else get_settings())
        self.gateway = gateway or ModelGateway(self.settings)
        self._sleep = sleep

    def is_configured(self) -> bool:
        """Check if AI enrichment is configured and available."""
        return self.gateway.is_configured

    async def enrich_batch(self, transactions: Sequence[EnrichmentTarget]) -> list[EnrichmentOutcome]:
        """
        Ask the model for one outcome per transaction, in input order.

        Returns an empty list when there is nothing to do or no credential is
        configured. The batch is sent as-is; callers chunk beforehand.
        """
        if not transactions:
            return []

        if not self.is_configured():
            logger.warning("Model API key not configured, skipping AI enrichment")
            return []

        transaction_data = prepare_transaction_data(transactions)
        prompt = build_enrichment_prompt(transaction_data, transactions)

        logger.info(f"Starting transaction enrichment batch of {len(transactions)}")

        try:
            batch_result = await with_retry(
                lambda: self.gateway.invoke_model(
                    self.settings.enrichment_model,
                    prompt,
                    BatchEnrichment,
                    timeout=self.settings.enrichment_timeout_seconds,
                    temperature=self.settings.enrichment_temperature,
                ),
                self.settings.enrichment_retries,
                self.settings.retry_base_delay_ms,
                sleep=self._sleep,
            )
        except Exception as e:
            logger.error(f"Enrichment batch of {len(transactions)} failed: {e}")
            raise

        logger.info(
            f"Enrichment batch completed: {len(batch_result.results)} results "
            f"for {len(transactions)} transactions"
        )
        return batch_result.results

    def process_results(
        self,
        transactions: Sequence[EnrichmentTarget],
        outcomes: Sequence[EnrichmentOutcome],
    ) -> list[EnrichmentProcessResult]:
        """
        Pair outcomes with transactions by position and apply the gates.

        Transactions without an outcome are reported with an error; surplus
        outcomes are dropped.
        """
        results: list[EnrichmentProcessResult] = []

        for index, transaction in enumerate(transactions):
            if index >= len(outcomes):
                results.append(
                    EnrichmentProcessResult(
                        transaction_id=transaction.id,
                        updated=False,
                        error=MISSING_RESULT_ERROR,
                    )
                )
                continue

            update = prepare_update_data(
                transaction,
                outcomes[index],
                merchant_threshold=self.settings.merchant_confidence_threshold,
                category_threshold=self.settings.category_confidence_threshold,
            )
            results.append(
                EnrichmentProcessResult(
                    transaction_id=transaction.id,
                    merchant_name=update.merchant_name,
                    category_slug=update.category_slug,
                    updated=update.has_updates,
                )
            )

        if len(outcomes) > len(transactions):
            logger.warning(
                f"Dropping {len(outcomes) - len(transactions)} surplus enrichment results"
            )

        return results

    async def enrich(self, transactions: Sequence[EnrichmentTarget]) -> list[EnrichmentProcessResult]:
        """
        Enrich a single batch and return one processed result per transaction.

        Returns an empty list when enrichment is not configured.
        """
        if not transactions or not self.is_configured():
            if transactions:
                logger.warning("Model API key not configured, skipping AI enrichment")
            return []

        outcomes = await self.enrich_batch(transactions)
        return self.process_results(transactions, outcomes)

    async def run(self, transactions: Sequence[EnrichmentTarget]) -> EnrichmentRun:
        """
        Enrich any number of transactions in sequential batches.

        Transactions that already have both a merchant name and a category
        are reported in place without being sent to the model. Results are
        returned in input order.
        """
        if not transactions or not self.is_configured():
            if transactions:
                logger.warning("Model API key not configured, skipping AI enrichment")
            return EnrichmentRun()

        pending = [tx for tx in transactions if needs_enrichment(tx)]
        batches = 0

        async def enrich_chunk(batch: list[EnrichmentTarget]) -> list[EnrichmentProcessResult]:
            nonlocal batches
            batches += 1
            return await self.enrich(batch)

        processed = await process_sequentially(
            pending, self.settings.enrichment_batch_size, enrich_chunk
        )
        enriched = iter(processed)

        results = [
            next(enriched)
            if needs_enrichment(tx)
            else EnrichmentProcessResult(transaction_id=tx.id, updated=False)
            for tx in transactions
        ]
        stats = calculate_enrichment_stats(results)

        logger.info(
            f"Enrichment completed: processed={stats.total_processed}, "
            f"updated={stats.updates_applied}, errors={stats.errors}, batches={batches}"
        )
        return EnrichmentRun(results=results, stats=stats, batches=batches)
