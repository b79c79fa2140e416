import base64
import json
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import psycopg

from discharge_pipeline.database.repositories.event_repository import EventRepository
from discharge_pipeline.events.models import (
    CompletionEvent,
    StorageObjectMetadata,
    StorageTriggerEvent,
)
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.processor.exceptions import TransportError
from discharge_pipeline.storage.locations import ObjectLocation


class EventPublisher:
    """Appends pipeline events to the event bus."""

    def __init__(
        self,
        event_repo: EventRepository,
        *,
        completion_topic: str,
        raw_upload_topic: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._event_repo = event_repo
        self._completion_topic = completion_topic
        self._raw_upload_topic = raw_upload_topic
        self._clock = clock or (lambda: datetime.now(UTC))

    def publish(self, event: CompletionEvent) -> str:
        """Publish a completion event wrapped in a Pub/Sub style envelope.

        Raises:
            TransportError: if the event bus write fails.
        """
        data = json.dumps(event.to_json()).encode("utf-8")
        envelope = {
            "message": {
                "data": base64.b64encode(data).decode("ascii"),
                "attributes": {
                    "tenantId": event.tenant_id,
                    "compositionId": event.composition_id,
                },
                "publishTime": self._clock().isoformat(),
            }
        }
        message_id = self._append(self._completion_topic, envelope)
        Log.info(
            "Completion event published",
            topic=self._completion_topic,
            message_id=message_id,
            composition_id=event.composition_id,
            artifacts=len(event.artifacts),
        )
        return message_id

    def publish_storage_trigger(
        self,
        location: ObjectLocation,
        metadata: StorageObjectMetadata,
        size: int | None = None,
    ) -> str:
        """Announce a newly written raw object on the raw upload topic."""
        event = StorageTriggerEvent(
            bucket=location.bucket,
            name=location.key,
            generation=str(int(self._clock().timestamp() * 1_000_000)),
            metadata=metadata,
            size=size,
            content_type="text/plain",
        )
        message_id = self._append(self._raw_upload_topic, event.to_json())
        Log.info(
            "Storage trigger published",
            topic=self._raw_upload_topic,
            message_id=message_id,
            location=location.uri,
        )
        return message_id

    def _append(self, topic: str, payload: dict[str, Any]) -> str:
        try:
            return str(self._event_repo.append(topic, payload))
        except (psycopg.Error, RuntimeError) as exc:
            raise TransportError(f"Failed to publish event to {topic}: {exc}") from exc
