"""Pytest configuration and fixtures."""

import pytest

from docsense.config import Settings
from docsense.core.models import (
    DocumentExtraction,
    DocumentType,
    EnrichmentTarget,
    LineItem,
    TaxType,
)


class FakeGateway:
    """
    In-memory stand-in for ModelGateway.

    Each call to invoke_model consumes the next scripted response; exceptions
    in the script are raised instead of returned.
    """

    def __init__(self, settings: Settings, responses=None, configured: bool = True):
        self.settings = settings
        self.responses = list(responses or [])
        self.configured = configured
        self.calls: list[dict] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def invoke_model(
        self,
        model_id,
        prompt,
        schema,
        attachment=None,
        *,
        timeout=None,
        temperature=0.1,
    ):
        self.calls.append(
            {
                "model_id": model_id,
                "prompt": prompt,
                "schema": schema,
                "attachment": attachment,
                "timeout": timeout,
                "temperature": temperature,
            }
        )
        if not self.responses:
            raise AssertionError("FakeGateway ran out of scripted responses")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


class SleepRecorder:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def clear_model_credentials(monkeypatch):
    """Keep credentials from the developer's shell out of the tests."""
    monkeypatch.delenv("GOOGLE_GENERATIVE_AI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)


@pytest.fixture
def settings() -> Settings:
    """Settings with a fake credential and defaults otherwise."""
    return Settings(google_api_key="test-key", _env_file=None)


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings without any model credential."""
    return Settings(google_api_key="", _env_file=None)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_gateway(settings):
    """Factory for scripted fake gateways."""

    def _make(*responses, configured: bool = True) -> FakeGateway:
        return FakeGateway(settings, responses, configured=configured)

    return _make


@pytest.fixture
def sample_extraction() -> DocumentExtraction:
    """A complete, internally consistent invoice extraction."""
    return DocumentExtraction(
        vendor_name="Acme d.o.o.",
        vendor_address="Knez Mihailova 1, 11000 Beograd",
        website="acme.rs",
        email="billing@acme.rs",
        invoice_number="INV-2024-001",
        date="2024-01-15",
        due_date="2024-02-15",
        currency="EUR",
        total_amount=1512.50,
        subtotal_amount=1250.00,
        tax_amount=262.50,
        tax_rate=21,
        tax_type=TaxType.VAT,
        document_type=DocumentType.INVOICE,
        customer_name="Customer Ltd",
        line_items=[
            LineItem(description="Widget A", quantity=10, unit_price=100.00, total_price=1000.00),
            LineItem(description="Widget B", quantity=5, unit_price=50.00, total_price=250.00),
        ],
        payment_method="bank_transfer",
        iban="RS35260005601001611379",
        language="serbian",
    )


@pytest.fixture
def poor_extraction() -> DocumentExtraction:
    """Pass 1 result missing vendor and date."""
    return DocumentExtraction(
        currency="EUR",
        total_amount=42.0,
        document_type=DocumentType.RECEIPT,
    )


@pytest.fixture
def expense() -> EnrichmentTarget:
    """Uncategorized card expense."""
    return EnrichmentTarget(
        id="tx-1",
        description="AMZN Mktp DE*2K4L",
        amount=-59.99,
        currency="EUR",
    )
