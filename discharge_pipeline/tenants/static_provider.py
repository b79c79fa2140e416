from discharge_pipeline.tenants.base import BaseTenantConfigProvider
from discharge_pipeline.tenants.models import TenantConfig


class StaticTenantConfigProvider(BaseTenantConfigProvider):
    """Serves one configuration, taken from settings, to every tenant."""

    def __init__(
        self,
        *,
        translation_enabled: bool,
        supported_languages: list[str],
        translated_bucket: str | None = None,
    ) -> None:
        self._translation_enabled = translation_enabled
        self._supported_languages = tuple(supported_languages)
        self._translated_bucket = translated_bucket

    def get_config(self, tenant_id: str) -> TenantConfig | None:
        return TenantConfig(
            tenant_id=tenant_id,
            translation_enabled=self._translation_enabled,
            supported_languages=self._supported_languages,
            translated_bucket=self._translated_bucket,
        )
