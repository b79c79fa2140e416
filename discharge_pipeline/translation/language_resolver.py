from dataclasses import dataclass

from discharge_pipeline.logging.logger import Log
from discharge_pipeline.tenants.models import TenantConfig

REASON_NO_TENANT_CONFIG = "no_tenant_config"
REASON_DISABLED = "translation_disabled"
REASON_NO_LANGUAGES = "no_supported_languages"
REASON_PREFERRED = "preferred_language"
REASON_FALLBACK = "fallback_language"


@dataclass(frozen=True)
class LanguageResolution:
    target_language: str | None
    reason: str


def resolve_target_language(
    tenant_config: TenantConfig | None,
    preferred_language: str | None,
    source_language: str = "en",
) -> LanguageResolution:
    """Choose the language a completed document should be translated into.

    Returns a resolution with ``target_language=None`` when the tenant has no
    config, has translation disabled, or supports no language other than the
    source language. Never raises.
    """
    if tenant_config is None:
        return LanguageResolution(None, REASON_NO_TENANT_CONFIG)
    if not tenant_config.translation_enabled:
        return LanguageResolution(None, REASON_DISABLED)

    candidates = [
        language
        for language in tenant_config.supported_languages
        if language and language != source_language
    ]
    if not candidates:
        return LanguageResolution(None, REASON_NO_LANGUAGES)

    if preferred_language and preferred_language in candidates:
        return LanguageResolution(preferred_language, REASON_PREFERRED)

    Log.info(
        "Preferred language not supported, using tenant default",
        tenant_id=tenant_config.tenant_id,
        preferred_language=preferred_language,
        target_language=candidates[0],
    )
    return LanguageResolution(candidates[0], REASON_FALLBACK)
