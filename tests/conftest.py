from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from discharge_pipeline.artifacts.artifact_store import ArtifactStore
from discharge_pipeline.database.models import DischargeDocumentRecord, DocumentUpdate
from discharge_pipeline.database.repositories.discharge_documents_repository import (
    merge_document,
)
from discharge_pipeline.storage.local_object_store import LocalObjectStore


class InMemoryDocumentsRepository:
    """Applies the real merge rules to a dict keyed by natural key."""

    def __init__(self) -> None:
        self.records: dict[str, DischargeDocumentRecord] = {}
        self._now = datetime(2026, 1, 1, tzinfo=UTC)

    def upsert(self, natural_key: str, update: DocumentUpdate) -> DischargeDocumentRecord:
        self._now += timedelta(seconds=1)
        existing = self.records.get(natural_key) or DischargeDocumentRecord(
            id=len(self.records) + 1,
            natural_key=natural_key,
            tenant_id=update.tenant_id or "",
            composition_id=update.composition_id or "",
            raw_location=update.raw_location or natural_key,
            created_at=self._now,
            updated_at=self._now,
        )
        merged = merge_document(existing, update, self._now)
        self.records[natural_key] = merged
        return merged


@pytest.fixture()
def documents_repo() -> InMemoryDocumentsRepository:
    return InMemoryDocumentsRepository()


@pytest.fixture()
def artifact_store(tmp_path: Path, documents_repo: InMemoryDocumentsRepository) -> ArtifactStore:
    """ArtifactStore over a temporary local object store and in-memory metadata."""
    return ArtifactStore(LocalObjectStore(tmp_path), documents_repo)  # type: ignore[arg-type]


@pytest.fixture()
def discharge_summary_text() -> str:
    return (
        "DISCHARGE SUMMARY\n"
        "Patient: Jane Doe\n"
        "Admission date: 2026-01-03. Hospital: St. Mary.\n"
        "Diagnosis: community acquired pneumonia.\n"
        "Treatment: IV antibiotics, switched to oral amoxicillin.\n"
        "Medication: amoxicillin 500 mg three times daily for 5 days.\n"
        "Follow-up with primary care doctor in one week.\n"
    )
