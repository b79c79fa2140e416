from discharge_pipeline.artifacts.artifact_store import ArtifactStore
from discharge_pipeline.config.settings import Settings
from discharge_pipeline.database.models import STATUS_RAW_ONLY, DocumentUpdate
from discharge_pipeline.database.repositories.discharge_documents_repository import (
    DischargeDocumentsRepository,
)
from discharge_pipeline.database.repositories.event_repository import EventRepository
from discharge_pipeline.events.models import StorageObjectMetadata
from discharge_pipeline.events.publisher import EventPublisher
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.storage.local_object_store import LocalObjectStore
from discharge_pipeline.storage.locations import ObjectLocation, raw_key


class RawDocumentIngestor:
    """Stores an exported raw document and announces it to the pipeline."""

    def __init__(
        self,
        artifact_store: ArtifactStore,
        publisher: EventPublisher,
        *,
        raw_bucket: str,
        scheme: str = "local",
    ) -> None:
        self._artifact_store = artifact_store
        self._publisher = publisher
        self._raw_bucket = raw_bucket
        self._scheme = scheme

    def ingest(
        self,
        tenant_id: str,
        composition_id: str,
        kind: str,
        text: str,
        patient_id: str | None = None,
        preferred_language: str | None = None,
    ) -> ObjectLocation:
        """Write the raw artifact, record it and publish its storage trigger.

        Raises:
            ValueError: if *kind* is not a known document kind.
            TransportError: if the object write or event publish fails.
        """
        location = ObjectLocation(
            bucket=self._raw_bucket,
            key=raw_key(composition_id, kind),
            scheme=self._scheme,
        )
        data = text.encode("utf-8")
        self._artifact_store.write_artifact(location, data)
        self._artifact_store.record_stage_complete(
            location.uri,
            DocumentUpdate(
                tenant_id=tenant_id,
                composition_id=composition_id,
                raw_location=location.uri,
                status=STATUS_RAW_ONLY,
            ),
        )
        self._publisher.publish_storage_trigger(
            location,
            StorageObjectMetadata(
                tenant_id=tenant_id,
                composition_id=composition_id,
                category=kind,
                patient_id=patient_id,
                preferred_language=preferred_language,
            ),
            size=len(data),
        )
        Log.info(
            "Raw document ingested",
            tenant_id=tenant_id,
            composition_id=composition_id,
            location=location.uri,
        )
        return location


def build_ingestor(settings: Settings) -> RawDocumentIngestor:
    """Build a RawDocumentIngestor writing to the configured raw bucket."""
    artifact_store = ArtifactStore(
        LocalObjectStore(settings.storage_root),
        DischargeDocumentsRepository(),
    )
    publisher = EventPublisher(
        EventRepository(settings.max_delivery_attempts),
        completion_topic=settings.completion_topic,
        raw_upload_topic=settings.raw_upload_topic,
    )
    return RawDocumentIngestor(
        artifact_store,
        publisher,
        raw_bucket=settings.raw_bucket,
        scheme=settings.storage_scheme,
    )
