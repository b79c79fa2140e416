import pytest
from pydantic import ValidationError

from discharge_pipeline.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_max_delivery_attempts(self) -> None:
        s = Settings()
        assert s.max_delivery_attempts == 5

    def test_default_retry_policy(self) -> None:
        s = Settings()
        assert s.max_retries == 3
        assert s.retry_delay_seconds == 1.0

    def test_default_buckets(self) -> None:
        s = Settings()
        assert s.raw_bucket == "discharge-summaries-raw"
        assert s.simplified_bucket == "discharge-summaries-simplified"
        assert s.translated_bucket == "discharge-summaries-translated"

    def test_default_allowed_extensions(self) -> None:
        s = Settings()
        assert s.allowed_file_extensions == [".txt", ".md"]

    def test_default_completion_topic(self) -> None:
        s = Settings()
        assert s.completion_topic == "discharge-simplification-completed"

    def test_default_providers(self) -> None:
        s = Settings()
        assert s.simplification_provider == "openai"
        assert s.translation_provider == "google"
        assert s.tenant_config_provider == "backend"

    def test_default_source_language(self) -> None:
        s = Settings()
        assert s.source_language == "en"

    def test_default_pool_and_backoff(self) -> None:
        s = Settings()
        assert (s.db_pool_min_size, s.db_pool_max_size) == (1, 10)
        assert s.db_connect_timeout_seconds == 10.0
        assert s.event_poll_max_backoff_seconds == 60
        assert s.static_translated_bucket is None


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_max_retries(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_RETRIES", "5")
        s = Settings()
        assert s.max_retries == 5

    def test_loads_retry_delay(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RETRY_DELAY_SECONDS", "0.25")
        s = Settings()
        assert s.retry_delay_seconds == 0.25

    def test_loads_static_languages_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STATIC_SUPPORTED_LANGUAGES", '["es", "fr"]')
        s = Settings()
        assert s.static_supported_languages == ["es", "fr"]


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_max_retries_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_RETRIES", "many")
        with pytest.raises(ValidationError):
            Settings()
