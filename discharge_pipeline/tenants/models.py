from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TenantConfig:
    """Per-tenant pipeline settings served by the system of record."""

    tenant_id: str
    translation_enabled: bool = False
    supported_languages: tuple[str, ...] = ()
    translated_bucket: str | None = None

    @classmethod
    def from_payload(cls, tenant_id: str, payload: Any) -> "TenantConfig":
        """Build a config from the backend's camelCase JSON document.

        Raises:
            ValueError: if the document or one of its sections is not an object.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Tenant config must be a JSON object, got {type(payload).__name__}")
        translation = _section(payload, "translationConfig")
        buckets = _section(payload, "buckets")
        languages = translation.get("supportedLanguages") or []
        if not isinstance(languages, list):
            raise ValueError("translationConfig.supportedLanguages must be a list")
        return cls(
            tenant_id=str(payload.get("tenantId") or tenant_id),
            translation_enabled=bool(translation.get("enabled", False)),
            supported_languages=tuple(str(language) for language in languages),
            translated_bucket=buckets.get("translatedBucket") or None,
        )


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a JSON object")
    return value


@dataclass(frozen=True)
class TranslatedContent:
    """One translated artifact, as sent back to the system of record."""

    kind: str
    content: str
    language: str
    location: str


@dataclass
class WriteBackPayload:
    tenant_id: str
    documents: list[TranslatedContent] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        translated: dict[str, Any] = {}
        for document in self.documents:
            translated[document.kind] = {
                "content": document.content,
                "language": document.language,
                "gcsPath": document.location,
            }
        return {"tenantId": self.tenant_id, "translatedContent": translated}
