"""Decodes the envelopes pipeline events arrive in.

Producers wrap events in several ways: Pub/Sub push messages, CloudEvents from
storage triggers, plain or base64 encoded JSON. Rather than guessing, the
decoder peels envelopes off in a fixed order until the remaining JSON object
is recognisable as a completion event or a storage object.
"""

import base64
import binascii
import json
import re
from collections.abc import Callable
from typing import Any

from discharge_pipeline.events.exceptions import EventDecodeError
from discharge_pipeline.events.models import (
    CompletionEvent,
    PipelineEvent,
    StorageTriggerEvent,
)

_MAX_UNWRAP_DEPTH = 6
_CLOUD_EVENT_ID_RE = re.compile(r"^(?P<bucket>[^/]+)/(?P<name>.+)/(?P<generation>\d+)$")


def _from_bytes(value: Any) -> Any:
    if not isinstance(value, (bytes, bytearray)):
        return None
    try:
        return bytes(value).decode("utf-8")
    except UnicodeDecodeError:
        return None


def _from_json_string(value: Any) -> Any:
    if not isinstance(value, str) or not value.lstrip().startswith("{"):
        return None
    try:
        return json.loads(value)
    except ValueError:
        return None


def _from_base64_string(value: Any) -> Any:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return base64.b64decode(value.strip(), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        return None


def _from_pubsub_message(value: Any) -> Any:
    if not isinstance(value, dict):
        return None
    message = value.get("message")
    if isinstance(message, dict) and isinstance(message.get("data"), (str, bytes)):
        return message["data"]
    return None


def _from_data_string(value: Any) -> Any:
    if isinstance(value, dict) and isinstance(value.get("data"), (str, bytes)):
        return value["data"]
    return None


def _from_cloud_event_data(value: Any) -> Any:
    if isinstance(value, dict) and isinstance(value.get("data"), dict):
        return value["data"]
    return None


def _from_cloud_event_id(value: Any) -> Any:
    if not isinstance(value, dict) or not isinstance(value.get("id"), str):
        return None
    match = _CLOUD_EVENT_ID_RE.match(value["id"])
    if match is None:
        return None
    return match.groupdict()


ENVELOPE_SHAPES: tuple[tuple[str, Callable[[Any], Any]], ...] = (
    ("bytes", _from_bytes),
    ("json_string", _from_json_string),
    ("base64_string", _from_base64_string),
    ("pubsub_message", _from_pubsub_message),
    ("data_string", _from_data_string),
    ("cloud_event_data", _from_cloud_event_data),
    ("cloud_event_id", _from_cloud_event_id),
)


def _classify(value: dict[str, Any]) -> PipelineEvent | None:
    if "compositionId" in value and ("simplifiedFiles" in value or "artifacts" in value):
        return CompletionEvent.from_json(value)
    if value.get("bucket") and value.get("name"):
        return StorageTriggerEvent.from_json(value)
    return None


def _unwrap(value: Any) -> Any:
    for _, shape in ENVELOPE_SHAPES:
        unwrapped = shape(value)
        if unwrapped is not None:
            return unwrapped
    return None


def decode_event(payload: Any) -> PipelineEvent:
    """Decode *payload* into a storage-trigger or completion event.

    Raises:
        EventDecodeError: if no envelope shape yields a recognisable event.
    """
    value = payload
    for _ in range(_MAX_UNWRAP_DEPTH):
        if isinstance(value, dict):
            event = _classify(value)
            if event is not None:
                return event
        value = _unwrap(value)
        if value is None:
            break
    raise EventDecodeError(f"Unrecognised event payload: {str(payload)[:200]}")
