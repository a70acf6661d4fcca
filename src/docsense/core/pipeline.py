"""Multi-pass document extraction pipeline."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from ..config import Settings, get_settings
from ..llm.errors import DocumentAIError
from ..llm.gateway import ModelGateway
from ..llm.prompts import build_extraction_prompt, build_fallback_prompt
from ..llm.retry import with_retry
from ..utils.file_handlers import Attachment, build_attachment
from ..validators import ConsistencyValidator, QualityScore, QualityScorer
from .models import DocumentExtraction

logger = logging.getLogger(__name__)

# Gap-filled from the fallback pass when absent in the primary pass
GAP_FILL_FIELDS: tuple[str, ...] = ("website", "invoice_number", "tax_amount", "tax_rate", "iban")


class ExtractionStage(str, Enum):
    """States of the extraction state machine."""

    PASS1 = "pass1"
    SCORE_PASS1 = "score_pass1"
    PASS2_FALLBACK = "pass2_fallback"
    MERGE = "merge"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ExtractionReport:
    """Extraction result together with how it was obtained."""

    data: DocumentExtraction
    quality: QualityScore
    final_quality: QualityScore
    stages: list[ExtractionStage] = field(default_factory=list)
    fallback_used: bool = False
    fallback_error: str | None = None
    warnings: list[str] = field(default_factory=list)


def _is_missing(value) -> bool:
    return value is None or value == ""


def merge_extractions(
    primary: DocumentExtraction,
    secondary: DocumentExtraction,
) -> DocumentExtraction:
    """
    Merge two extraction results, keeping the primary wherever it is usable.

    Critical fields come from the secondary only when missing or invalid in
    the primary; a handful of other fields are gap-filled. Everything else is
    taken from the primary unchanged.
    """
    updates: dict = {}

    if not primary.vendor_name and secondary.vendor_name:
        updates["vendor_name"] = secondary.vendor_name
    if (not primary.total_amount or primary.total_amount <= 0) and secondary.total_amount > 0:
        updates["total_amount"] = secondary.total_amount
    if not primary.currency and secondary.currency:
        updates["currency"] = secondary.currency
    if not primary.date and secondary.date:
        updates["date"] = secondary.date

    for name in GAP_FILL_FIELDS:
        if _is_missing(getattr(primary, name)) and not _is_missing(getattr(secondary, name)):
            updates[name] = getattr(secondary, name)

    return primary.model_copy(update=updates, deep=True)


class ExtractionPipeline:
    """
    Quality-gated extraction of invoices and receipts.

    Orchestrates: Pass 1 -> Score -> (Pass 2 fallback -> Merge) -> Done
    """

    def __init__(
        self,
        gateway: ModelGateway | None = None,
        settings: Settings | None = None,
        scorer: QualityScorer | None = None,
        consistency_validator: ConsistencyValidator | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize pipeline with gateway and validators.

        If not provided, creates default instances.
        """
        self.settings = settings or (gateway.settings if gateway else get_settings())
        self.gateway = gateway or ModelGateway(self.settings)
        self.scorer = scorer or QualityScorer()
        self.consistency_validator = consistency_validator or ConsistencyValidator()
        self._sleep = sleep

    async def extract(
        self,
        content: bytes,
        mime_type: str | None,
        company_name: str | None = None,
    ) -> DocumentExtraction:
        """
        Extract structured data from a document.

        Args:
            content: Raw file bytes
            mime_type: MIME type of the file
            company_name: Company receiving the document, used to tell vendor from customer

        Returns:
            Best available DocumentExtraction

        Raises:
            ConfigurationError: If no model credential is configured
            DocumentAIError: If the primary pass fails after all retries
            ValueError: If the file is empty, too large or unsupported
        """
        report = await self.extract_with_report(content, mime_type, company_name)
        return report.data

    async def extract_with_report(
        self,
        content: bytes,
        mime_type: str | None,
        company_name: str | None = None,
    ) -> ExtractionReport:
        """Run the extraction state machine and return the full report."""
        attachment = build_attachment(content, mime_type, self.settings.max_file_size_bytes)
        stages: list[ExtractionStage] = [ExtractionStage.PASS1]

        logger.info(
            f"Starting document extraction ({attachment.mime_type}, "
            f"company={company_name or '-'})"
        )

        # Pass 1: primary model, failures propagate
        try:
            primary = await self._run_pass(
                model=self.settings.primary_model,
                prompt=build_extraction_prompt(company_name),
                attachment=attachment,
                retries=self.settings.extraction_retries,
            )
        except DocumentAIError as e:
            stages.append(ExtractionStage.FAILED)
            logger.error(f"Document extraction failed: {e}")
            raise

        stages.append(ExtractionStage.SCORE_PASS1)
        quality = self.scorer.score(primary)
        logger.info(
            f"Pass 1 extraction complete: score={quality.score:.2f}, "
            f"missing={quality.missing_critical_fields}, vendor={primary.vendor_name!r}, "
            f"amount={primary.total_amount}, currency={primary.currency!r}"
        )

        if quality.is_acceptable(self.settings.quality_threshold):
            stages.append(ExtractionStage.DONE)
            return self._report(primary, quality, quality, stages)

        # Pass 2: fallback model with chain-of-thought, failures degrade to pass 1
        stages.append(ExtractionStage.PASS2_FALLBACK)
        logger.info(f"Pass 2: quality poor, trying fallback model {self.settings.fallback_model}")
        try:
            secondary = await self._run_pass(
                model=self.settings.fallback_model,
                prompt=build_fallback_prompt(company_name),
                attachment=attachment,
                retries=self.settings.fallback_retries,
            )
        except DocumentAIError as e:
            logger.warning(f"Fallback model failed, returning primary result: {e}")
            stages.append(ExtractionStage.DONE)
            return self._report(primary, quality, quality, stages, fallback_error=str(e))

        stages.append(ExtractionStage.MERGE)
        merged = merge_extractions(primary, secondary)
        final_quality = self.scorer.score(merged)
        logger.info(
            f"Pass 2 complete, merged results: score={final_quality.score:.2f}, "
            f"vendor={merged.vendor_name!r}, amount={merged.total_amount}, "
            f"currency={merged.currency!r}"
        )

        stages.append(ExtractionStage.DONE)
        return self._report(merged, quality, final_quality, stages, fallback_used=True)

    async def _run_pass(
        self,
        model: str,
        prompt: str,
        attachment: Attachment,
        retries: int,
    ) -> DocumentExtraction:
        """Run one pass (a model call including its own retries)."""
        return await with_retry(
            lambda: self.gateway.invoke_model(
                model,
                prompt,
                DocumentExtraction,
                attachment,
                timeout=self.settings.extraction_timeout_seconds,
                temperature=self.settings.extraction_temperature,
            ),
            retries,
            self.settings.retry_base_delay_ms,
            sleep=self._sleep,
        )

    def _report(
        self,
        data: DocumentExtraction,
        quality: QualityScore,
        final_quality: QualityScore,
        stages: list[ExtractionStage],
        fallback_used: bool = False,
        fallback_error: str | None = None,
    ) -> ExtractionReport:
        consistency = self.consistency_validator.validate(data)
        if consistency.warnings:
            logger.info(f"Consistency warnings: {consistency.warnings}")

        return ExtractionReport(
            data=data,
            quality=quality,
            final_quality=final_quality,
            stages=stages,
            fallback_used=fallback_used,
            fallback_error=fallback_error,
            warnings=consistency.warnings,
        )
