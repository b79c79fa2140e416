import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from discharge_pipeline.events.models import CompletionEvent, StorageTriggerEvent
from discharge_pipeline.processor.exceptions import PipelineError
from discharge_pipeline.simplification.models import SimplificationResult
from discharge_pipeline.storage.locations import ObjectLocation
from discharge_pipeline.tenants.models import TenantConfig, TranslatedContent


@dataclass(slots=True, kw_only=True)
class PipelineContext:
    """State carried through the steps of one event invocation."""

    started_at: float = field(default_factory=time.monotonic)
    stopped: bool = False
    stop_reason: str = ""
    # Raw object URI of the document being worked on; per artifact during translation.
    natural_key: str = ""
    tenant_id: str = ""
    composition_id: str = ""

    def stop(self, reason: str) -> None:
        self.stopped = True
        self.stop_reason = reason

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)


@dataclass(slots=True, kw_only=True)
class SimplificationContext(PipelineContext):
    event: StorageTriggerEvent
    source: ObjectLocation | None = None
    kind: str | None = None
    patient_id: str | None = None
    preferred_language: str | None = None
    raw_text: str = ""
    simplification: SimplificationResult | None = None
    normalized_text: str = ""
    simplified_location: ObjectLocation | None = None
    message_id: str | None = None


@dataclass(slots=True, kw_only=True)
class TranslationContext(PipelineContext):
    event: CompletionEvent
    tenant_config: TenantConfig | None = None
    target_language: str | None = None
    translated: list[TranslatedContent] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)


C = TypeVar("C", bound=PipelineContext)
T = TypeVar("T")


def require(value: T | None, name: str) -> T:
    """Return a context field set by an earlier step.

    Raises:
        PipelineError: if the field is unset because steps ran out of order.
    """
    if value is None:
        raise PipelineError(f"Pipeline context has no {name}; an earlier step did not run")
    return value


class PipelineStep(ABC, Generic[C]):
    @abstractmethod
    def run(self, context: C) -> C:
        raise NotImplementedError
