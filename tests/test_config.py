"""Tests for settings loading."""

from docsense.config import Settings


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.primary_model == "gemini-2.0-flash"
        assert settings.fallback_model == "gemini-1.5-flash"
        assert settings.enrichment_model == "gemini-2.5-flash-lite"
        assert settings.extraction_retries == 2
        assert settings.retry_base_delay_ms == 2000
        assert settings.quality_threshold == 0.7
        assert settings.enrichment_batch_size == 50
        assert settings.max_file_size_bytes == 20 * 1024 * 1024

    def test_api_key_from_either_variable(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_GENERATIVE_AI_API_KEY", "from-env")

        settings = Settings(_env_file=None)

        assert settings.google_api_key == "from-env"
        assert settings.is_model_configured

    def test_blank_key_is_not_configured(self):
        assert not Settings(google_api_key="   ", _env_file=None).is_model_configured

    def test_log_level_normalized(self):
        assert Settings(log_level="debug", _env_file=None).log_level == "DEBUG"
