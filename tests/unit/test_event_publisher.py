import base64
import json
from datetime import UTC, datetime
from unittest.mock import MagicMock

import psycopg
import pytest

from discharge_pipeline.events.decoder import decode_event
from discharge_pipeline.events.models import (
    ArtifactDescriptor,
    CompletionEvent,
    StorageObjectMetadata,
    StorageTriggerEvent,
)
from discharge_pipeline.events.publisher import EventPublisher
from discharge_pipeline.processor.exceptions import TransportError
from discharge_pipeline.storage.locations import ObjectLocation

NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)


def _make_publisher() -> tuple[EventPublisher, MagicMock]:
    repo = MagicMock()
    repo.append.return_value = 17
    publisher = EventPublisher(
        repo,
        completion_topic="completed",
        raw_upload_topic="raw-uploaded",
        clock=lambda: NOW,
    )
    return publisher, repo


def _event() -> CompletionEvent:
    return CompletionEvent(
        tenant_id="t1",
        composition_id="c1",
        artifacts=(ArtifactDescriptor("discharge-summary", "local://raw/a.txt", "local://s/a.txt"),),
        processing_time_ms=1,
        tokens_used=2,
        timestamp=NOW.isoformat(),
    )


class TestPublish:
    def test_appends_envelope_to_completion_topic(self) -> None:
        publisher, repo = _make_publisher()

        message_id = publisher.publish(_event())

        assert message_id == "17"
        topic, envelope = repo.append.call_args.args
        assert topic == "completed"
        message = envelope["message"]
        assert message["attributes"] == {"tenantId": "t1", "compositionId": "c1"}
        assert message["publishTime"] == NOW.isoformat()
        assert json.loads(base64.b64decode(message["data"]))["compositionId"] == "c1"

    def test_published_envelope_decodes_back(self) -> None:
        publisher, repo = _make_publisher()
        publisher.publish(_event())

        envelope = repo.append.call_args.args[1]

        assert decode_event(envelope) == _event()

    def test_bus_failure_raises_transport_error(self) -> None:
        publisher, repo = _make_publisher()
        repo.append.side_effect = psycopg.OperationalError("down")

        with pytest.raises(TransportError):
            publisher.publish(_event())


class TestPublishStorageTrigger:
    def test_appends_direct_storage_object(self) -> None:
        publisher, repo = _make_publisher()
        location = ObjectLocation("raw", "c1-discharge-summary.txt")

        publisher.publish_storage_trigger(
            location, StorageObjectMetadata(tenant_id="t1", composition_id="c1"), size=12
        )

        topic, payload = repo.append.call_args.args
        assert topic == "raw-uploaded"
        event = decode_event(payload)
        assert isinstance(event, StorageTriggerEvent)
        assert event.bucket == "raw"
        assert event.name == "c1-discharge-summary.txt"
        assert event.size == 12
        assert event.metadata.composition_id == "c1"
