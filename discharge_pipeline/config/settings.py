from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "discharge_pipeline"
    db_username: str = "discharge_pipeline"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_connect_timeout_seconds: float = 10.0

    max_delivery_attempts: int = 5
    event_poll_interval_seconds: int = 5
    event_poll_max_backoff_seconds: int = 60

    storage_root: str = "/app/storage"
    storage_scheme: str = "local"
    raw_bucket: str = "discharge-summaries-raw"
    simplified_bucket: str = "discharge-summaries-simplified"
    translated_bucket: str = "discharge-summaries-translated"
    allowed_file_extensions: list[str] = [".txt", ".md"]
    max_file_size_mb: int = 5

    raw_upload_topic: str = "discharge-raw-uploaded"
    completion_topic: str = "discharge-simplification-completed"

    max_retries: int = 3
    retry_delay_seconds: float = 1.0

    simplification_provider: str = "openai"
    simplification_openai_api_key: str = ""
    simplification_openai_model_name: str = "gpt-4o-mini"
    simplification_openai_timeout_seconds: int = 60
    simplification_openai_compatible_base_url: str = ""
    simplification_temperature: float = 0.0
    simplification_max_output_tokens: int = 8192

    translation_provider: str = "google"
    translation_google_api_key: str = ""
    translation_google_timeout_seconds: int = 30
    translation_openai_api_key: str = ""
    translation_openai_model_name: str = "gpt-4o-mini"
    translation_openai_timeout_seconds: int = 60
    source_language: str = "en"

    tenant_config_provider: str = "backend"
    backend_api_url: str = "http://localhost:3000"
    backend_timeout_seconds: int = 10
    default_tenant_id: str = "default"
    static_translation_enabled: bool = True
    static_supported_languages: list[str] = ["es"]
    static_translated_bucket: str | None = None
    write_back_enabled: bool = True
