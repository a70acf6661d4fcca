"""Tests for the multi-pass extraction pipeline."""

import pytest

from docsense.core.models import DocumentExtraction, DocumentType
from docsense.core.pipeline import ExtractionPipeline, ExtractionStage, merge_extractions
from docsense.llm import ConfigurationError, ParseError, UpstreamError, ValidationError

PDF_BYTES = b"%PDF-1.4 fake invoice"


class TestMergeExtractions:
    """Test cases for merging pass 1 and pass 2 results."""

    def test_fills_missing_vendor_and_keeps_positive_total(self):
        primary = DocumentExtraction(
            vendor_name=None,
            total_amount=500,
            currency="EUR",
            date="2024-01-01",
            document_type=DocumentType.INVOICE,
        )
        secondary = DocumentExtraction(
            vendor_name="Acme d.o.o.",
            total_amount=0,
            currency="EUR",
            date="2024-01-02",
            document_type=DocumentType.INVOICE,
        )

        merged = merge_extractions(primary, secondary)

        assert merged.vendor_name == "Acme d.o.o."
        assert merged.total_amount == 500
        assert merged.date == "2024-01-01"

    def test_replaces_non_positive_total(self, poor_extraction, sample_extraction):
        primary = poor_extraction.model_copy(update={"total_amount": 0})

        merged = merge_extractions(primary, sample_extraction)

        assert merged.total_amount == sample_extraction.total_amount

    def test_gap_fills_secondary_fields(self, poor_extraction, sample_extraction):
        merged = merge_extractions(poor_extraction, sample_extraction)

        assert merged.website == "acme.rs"
        assert merged.invoice_number == "INV-2024-001"
        assert merged.tax_rate == 21
        assert merged.iban == sample_extraction.iban

    def test_other_fields_come_from_primary(self, poor_extraction, sample_extraction):
        merged = merge_extractions(poor_extraction, sample_extraction)

        assert merged.document_type == DocumentType.RECEIPT
        assert merged.line_items == []
        assert merged.customer_name is None

    def test_zero_tax_amount_is_kept(self, sample_extraction):
        primary = sample_extraction.model_copy(update={"tax_amount": 0.0})

        merged = merge_extractions(primary, sample_extraction)

        assert merged.tax_amount == 0.0

    def test_inputs_are_not_mutated(self, poor_extraction, sample_extraction):
        before = poor_extraction.model_dump()

        merge_extractions(poor_extraction, sample_extraction)

        assert poor_extraction.model_dump() == before


class TestExtractionPipeline:
    """Test cases for ExtractionPipeline."""

    @pytest.mark.asyncio
    async def test_good_first_pass_skips_fallback(self, make_gateway, sample_extraction, sleep_recorder):
        gateway = make_gateway(sample_extraction)
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        report = await pipeline.extract_with_report(PDF_BYTES, "application/pdf", "Customer Ltd")

        assert report.data == sample_extraction
        assert not report.fallback_used
        assert report.stages == [ExtractionStage.PASS1, ExtractionStage.SCORE_PASS1, ExtractionStage.DONE]
        assert len(gateway.calls) == 1
        call = gateway.calls[0]
        assert call["model_id"] == "gemini-2.0-flash"
        assert call["schema"] is DocumentExtraction
        assert call["attachment"].mime_type == "application/pdf"
        assert '"Customer Ltd"' in call["prompt"]

    @pytest.mark.asyncio
    async def test_poor_first_pass_runs_fallback_and_merges(
        self, make_gateway, poor_extraction, sample_extraction, sleep_recorder
    ):
        gateway = make_gateway(poor_extraction, sample_extraction)
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        report = await pipeline.extract_with_report(PDF_BYTES, "application/pdf")

        assert report.fallback_used
        assert report.stages[-3:] == [ExtractionStage.PASS2_FALLBACK, ExtractionStage.MERGE, ExtractionStage.DONE]
        assert report.data.vendor_name == "Acme d.o.o."
        assert report.data.date == "2024-01-15"
        assert report.data.total_amount == 42.0
        assert report.quality.score == pytest.approx(0.65)
        assert report.final_quality.score == 1.0
        assert gateway.calls[1]["model_id"] == "gemini-1.5-flash"
        assert "CHAIN OF THOUGHT INSTRUCTIONS" in gateway.calls[1]["prompt"]

    @pytest.mark.asyncio
    async def test_malformed_first_pass_triggers_fallback(self, make_gateway, sample_extraction, sleep_recorder):
        weak = DocumentExtraction(
            total_amount=100,
            currency="EU",
            date="2024-13-40",
            document_type=DocumentType.INVOICE,
        )
        gateway = make_gateway(weak, sample_extraction)
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        report = await pipeline.extract_with_report(PDF_BYTES, "application/pdf")

        assert report.quality.score == pytest.approx(0.65)
        assert report.fallback_used
        assert len(gateway.calls) == 2

    @pytest.mark.asyncio
    async def test_fallback_failure_returns_primary(self, make_gateway, poor_extraction, sleep_recorder):
        gateway = make_gateway(poor_extraction, UpstreamError("down"), UpstreamError("still down"))
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        report = await pipeline.extract_with_report(PDF_BYTES, "application/pdf")

        assert report.data == poor_extraction
        assert not report.fallback_used
        assert report.fallback_error == "still down"
        assert report.stages[-1] == ExtractionStage.DONE
        # one fallback retry by default
        assert len(gateway.calls) == 3
        assert sleep_recorder.delays == [2.0]

    @pytest.mark.asyncio
    async def test_fallback_schema_mismatch_returns_primary(self, make_gateway, poor_extraction, sleep_recorder):
        gateway = make_gateway(poor_extraction, ValidationError("bad shape"), ValidationError("still bad"))
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        result = await pipeline.extract(PDF_BYTES, "application/pdf")

        assert result == poor_extraction

    @pytest.mark.asyncio
    async def test_first_pass_retries_then_succeeds(self, make_gateway, sample_extraction, sleep_recorder):
        gateway = make_gateway(ParseError("not json"), UpstreamError("429"), sample_extraction)
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        result = await pipeline.extract(PDF_BYTES, "application/pdf")

        assert result == sample_extraction
        assert sleep_recorder.delays == [2.0, 4.0]

    @pytest.mark.asyncio
    async def test_first_pass_schema_mismatch_is_retried(self, make_gateway, sample_extraction, sleep_recorder):
        gateway = make_gateway(ValidationError("total_amount: Input should be a valid number"), sample_extraction)
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        result = await pipeline.extract(PDF_BYTES, "application/pdf")

        assert result == sample_extraction
        assert len(gateway.calls) == 2
        assert sleep_recorder.delays == [2.0]

    @pytest.mark.asyncio
    async def test_first_pass_exhaustion_propagates(self, make_gateway, sleep_recorder):
        gateway = make_gateway(UpstreamError("a"), UpstreamError("b"), UpstreamError("c"))
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        with pytest.raises(UpstreamError, match="c"):
            await pipeline.extract(PDF_BYTES, "application/pdf")

        assert len(gateway.calls) == 3

    @pytest.mark.asyncio
    async def test_configuration_error_is_not_retried(self, make_gateway, sleep_recorder):
        gateway = make_gateway(ConfigurationError("no key"))
        pipeline = ExtractionPipeline(gateway, sleep=sleep_recorder)

        with pytest.raises(ConfigurationError):
            await pipeline.extract(PDF_BYTES, "application/pdf")

        assert len(gateway.calls) == 1
        assert sleep_recorder.delays == []

    @pytest.mark.asyncio
    async def test_invalid_file_rejected_before_model_call(self, make_gateway):
        gateway = make_gateway()
        pipeline = ExtractionPipeline(gateway)

        with pytest.raises(ValueError, match="Unsupported document type"):
            await pipeline.extract(b"PK\x03\x04", "application/zip")
        with pytest.raises(ValueError, match="empty"):
            await pipeline.extract(b"", "application/pdf")

        assert gateway.calls == []

    @pytest.mark.asyncio
    async def test_report_carries_consistency_warnings(self, make_gateway, sample_extraction):
        inconsistent = sample_extraction.model_copy(update={"total_amount": 2000.0})
        pipeline = ExtractionPipeline(make_gateway(inconsistent))

        report = await pipeline.extract_with_report(PDF_BYTES, "application/pdf")

        assert report.data.total_amount == 2000.0
        assert any("Grand total mismatch" in w for w in report.warnings)
