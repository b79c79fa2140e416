from dataclasses import dataclass, field
from typing import Any

from discharge_pipeline.events.exceptions import EventDecodeError


@dataclass(frozen=True)
class StorageObjectMetadata:
    """Custom metadata attached to a raw object when it is uploaded."""

    tenant_id: str | None = None
    composition_id: str | None = None
    category: str | None = None
    patient_id: str | None = None
    preferred_language: str | None = None

    _WIRE_KEYS = {
        "tenantId": "tenant_id",
        "compositionId": "composition_id",
        "category": "category",
        "patientId": "patient_id",
        "preferredLanguage": "preferred_language",
    }

    @classmethod
    def from_json(cls, data: Any) -> "StorageObjectMetadata":
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise EventDecodeError(f"Object metadata must be a JSON object: {data!r}")
        return cls(
            **{
                attr: str(data[key])
                for key, attr in cls._WIRE_KEYS.items()
                if data.get(key) not in (None, "")
            }
        )

    def to_json(self) -> dict[str, str]:
        return {
            key: getattr(self, attr)
            for key, attr in self._WIRE_KEYS.items()
            if getattr(self, attr) is not None
        }


@dataclass(frozen=True)
class StorageTriggerEvent:
    """A raw object was written to a bucket."""

    bucket: str
    name: str
    generation: str | None = None
    metadata: StorageObjectMetadata = field(default_factory=StorageObjectMetadata)
    size: int | None = None
    content_type: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "StorageTriggerEvent":
        size = data.get("size")
        try:
            parsed_size = int(size) if size not in (None, "") else None
        except (TypeError, ValueError) as exc:
            raise EventDecodeError(f"Invalid object size: {size!r}") from exc
        generation = data.get("generation")
        return cls(
            bucket=str(data["bucket"]),
            name=str(data["name"]),
            generation=str(generation) if generation not in (None, "") else None,
            metadata=StorageObjectMetadata.from_json(data.get("metadata")),
            size=parsed_size,
            content_type=data.get("contentType"),
        )

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"bucket": self.bucket, "name": self.name}
        if self.generation is not None:
            payload["generation"] = self.generation
        if self.size is not None:
            payload["size"] = str(self.size)
        if self.content_type is not None:
            payload["contentType"] = self.content_type
        metadata = self.metadata.to_json()
        if metadata:
            payload["metadata"] = metadata
        return payload


@dataclass(frozen=True)
class ArtifactDescriptor:
    """One simplified artifact listed in a completion event."""

    type: str
    original_path: str
    simplified_path: str
    language: str = "en"

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ArtifactDescriptor":
        try:
            descriptor = cls(
                type=str(data["type"]),
                original_path=str(data["originalPath"]),
                simplified_path=str(data["simplifiedPath"]),
                language=str(data.get("language") or "en"),
            )
        except (KeyError, TypeError) as exc:
            raise EventDecodeError(f"Invalid artifact descriptor: {data!r}") from exc
        if not descriptor.original_path.strip() or not descriptor.simplified_path.strip():
            raise EventDecodeError(f"Artifact descriptor has an empty path: {data!r}")
        return descriptor

    def to_json(self) -> dict[str, str]:
        return {
            "type": self.type,
            "originalPath": self.original_path,
            "simplifiedPath": self.simplified_path,
            "language": self.language,
        }


@dataclass(frozen=True)
class CompletionEvent:
    """Simplification of a composition finished; its artifacts are stored."""

    tenant_id: str
    composition_id: str
    artifacts: tuple[ArtifactDescriptor, ...]
    processing_time_ms: int
    tokens_used: int
    timestamp: str
    patient_id: str | None = None
    preferred_language: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "CompletionEvent":
        raw_artifacts = data.get("simplifiedFiles")
        if raw_artifacts is None:
            raw_artifacts = data.get("artifacts")
        if not isinstance(raw_artifacts, list):
            raise EventDecodeError("Completion event artifacts must be a list")
        try:
            return cls(
                tenant_id=str(data["tenantId"]),
                composition_id=str(data["compositionId"]),
                artifacts=tuple(ArtifactDescriptor.from_json(item) for item in raw_artifacts),
                processing_time_ms=int(data.get("processingTimeMs") or 0),
                tokens_used=int(data.get("tokensUsed") or 0),
                timestamp=str(data.get("timestamp") or ""),
                patient_id=data.get("patientId") or None,
                preferred_language=data.get("preferredLanguage") or None,
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise EventDecodeError(f"Invalid completion event: {exc}") from exc

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "tenantId": self.tenant_id,
            "compositionId": self.composition_id,
            "simplifiedFiles": [artifact.to_json() for artifact in self.artifacts],
            "processingTimeMs": self.processing_time_ms,
            "tokensUsed": self.tokens_used,
            "timestamp": self.timestamp,
        }
        if self.patient_id is not None:
            payload["patientId"] = self.patient_id
        if self.preferred_language is not None:
            payload["preferredLanguage"] = self.preferred_language
        return payload


PipelineEvent = StorageTriggerEvent | CompletionEvent
