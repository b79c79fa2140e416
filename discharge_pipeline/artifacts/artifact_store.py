"""Blob storage for pipeline artifacts plus their metadata records.

Artifact writes are the source of truth: a failed object write raises
``TransportError`` so the event is redelivered. Metadata writes describe the
artifacts for the rest of the platform and are best effort: a failed upsert is
logged and the pipeline carries on.
"""

import psycopg

from discharge_pipeline.database.models import (
    STATUS_ERROR,
    STATUS_PROCESSING,
    DischargeDocumentRecord,
    DocumentUpdate,
)
from discharge_pipeline.database.repositories.discharge_documents_repository import (
    DischargeDocumentsRepository,
)
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.storage.base import BaseObjectStore
from discharge_pipeline.storage.locations import ObjectLocation


class ArtifactStore:
    def __init__(
        self,
        object_store: BaseObjectStore,
        documents_repo: DischargeDocumentsRepository,
    ) -> None:
        self._object_store = object_store
        self._documents_repo = documents_repo

    def write_artifact(self, location: ObjectLocation, data: str | bytes) -> ObjectLocation:
        """Write an artifact, replacing any previous object at the same key.

        Raises:
            TransportError: if the object store write fails.
        """
        payload = data.encode("utf-8") if isinstance(data, str) else data
        self._object_store.put(location, payload)
        Log.info("Artifact written", location=location.uri, size=len(payload))
        return location

    def read_artifact(self, location: ObjectLocation) -> bytes:
        """Raises TransportError if the object is missing or unreadable."""
        return self._object_store.get(location)

    def read_text(self, location: ObjectLocation) -> str:
        return self.read_artifact(location).decode("utf-8")

    def record_stage_complete(
        self, natural_key: str, update: DocumentUpdate
    ) -> DischargeDocumentRecord | None:
        return self._upsert(natural_key, update)

    def record_processing(
        self, natural_key: str, update: DocumentUpdate
    ) -> DischargeDocumentRecord | None:
        return self._upsert(
            natural_key,
            DocumentUpdate(
                tenant_id=update.tenant_id,
                composition_id=update.composition_id,
                raw_location=update.raw_location,
                status=STATUS_PROCESSING,
            ),
        )

    def record_stage_failed(
        self,
        natural_key: str,
        message: str,
        *,
        tenant_id: str | None = None,
        composition_id: str | None = None,
    ) -> DischargeDocumentRecord | None:
        return self._upsert(
            natural_key,
            DocumentUpdate(
                tenant_id=tenant_id,
                composition_id=composition_id,
                status=STATUS_ERROR,
                error_message=message,
            ),
        )

    def _upsert(
        self, natural_key: str, update: DocumentUpdate
    ) -> DischargeDocumentRecord | None:
        try:
            record = self._documents_repo.upsert(natural_key, update)
        except (psycopg.Error, RuntimeError) as exc:
            Log.error(
                "Failed to record document metadata",
                natural_key=natural_key,
                status=update.status,
                error=str(exc),
            )
            return None
        Log.debug("Document metadata recorded", natural_key=natural_key, status=record.status)
        return record
