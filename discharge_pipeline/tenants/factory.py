from discharge_pipeline.config.settings import Settings
from discharge_pipeline.tenants.backend_provider import BackendTenantConfigProvider
from discharge_pipeline.tenants.base import BaseTenantConfigProvider
from discharge_pipeline.tenants.static_provider import StaticTenantConfigProvider


class TenantConfigProviderFactory:
    """Creates the configured tenant config provider."""

    SUPPORTED_PROVIDERS = ("backend", "static")

    @staticmethod
    def create(settings: Settings) -> BaseTenantConfigProvider:
        provider = settings.tenant_config_provider.lower()
        if provider == "backend":
            return BackendTenantConfigProvider(
                base_url=settings.backend_api_url,
                timeout_seconds=settings.backend_timeout_seconds,
            )
        if provider == "static":
            return StaticTenantConfigProvider(
                translation_enabled=settings.static_translation_enabled,
                supported_languages=settings.static_supported_languages,
                translated_bucket=settings.static_translated_bucket,
            )
        raise ValueError(
            f"Unknown tenant config provider '{provider}'. "
            f"Choose from: {list(TenantConfigProviderFactory.SUPPORTED_PROVIDERS)}"
        )
