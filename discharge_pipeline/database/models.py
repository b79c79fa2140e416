from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

STATUS_RAW_ONLY = "raw_only"
STATUS_PROCESSING = "processing"
STATUS_SIMPLIFIED = "simplified"
STATUS_TRANSLATED = "translated"
STATUS_ERROR = "error"

# Forward order of the lifecycle; ``error`` sits outside it.
STATUS_RANK: dict[str, int] = {
    STATUS_RAW_ONLY: 0,
    STATUS_PROCESSING: 1,
    STATUS_SIMPLIFIED: 2,
    STATUS_TRANSLATED: 3,
}
DOCUMENT_STATUSES = (*STATUS_RANK, STATUS_ERROR)

EVENT_PENDING = "pending"
EVENT_PROCESSING = "processing"
EVENT_DONE = "done"
EVENT_FAILED = "failed"


@dataclass
class DischargeDocumentRecord:
    """Represents a row from the discharge_documents table."""

    natural_key: str
    tenant_id: str
    composition_id: str
    raw_location: str
    status: str = STATUS_RAW_ONLY
    simplified_location: str | None = None
    translated_locations: dict[str, str] = field(default_factory=dict)
    error_message: str | None = None
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    simplified_at: datetime | None = None
    translated_at: datetime | None = None


@dataclass(frozen=True)
class DocumentUpdate:
    """Fields a pipeline stage reports for one document.

    ``None`` means "leave unchanged"; translated locations are merged per
    language.
    """

    tenant_id: str | None = None
    composition_id: str | None = None
    raw_location: str | None = None
    status: str | None = None
    simplified_location: str | None = None
    translated_locations: dict[str, str] = field(default_factory=dict)
    error_message: str | None = None

    def __post_init__(self) -> None:
        if self.status is not None and self.status not in DOCUMENT_STATUSES:
            raise ValueError(f"Unknown document status '{self.status}'")


@dataclass
class EventRecord:
    """Represents a row from the pipeline_events table."""

    id: int
    topic: str
    payload: dict[str, Any]
    status: str
    attempts: int
    error_message: str | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
