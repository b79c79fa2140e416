from collections.abc import Sequence
from typing import Any

from discharge_pipeline.artifacts.artifact_store import ArtifactStore
from discharge_pipeline.config.settings import Settings
from discharge_pipeline.database.repositories.discharge_documents_repository import (
    DischargeDocumentsRepository,
)
from discharge_pipeline.database.repositories.event_repository import EventRepository
from discharge_pipeline.events.decoder import decode_event
from discharge_pipeline.events.exceptions import EventDecodeError
from discharge_pipeline.events.models import StorageTriggerEvent
from discharge_pipeline.events.publisher import EventPublisher
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.normalization.section_normalizer import SectionNormalizer
from discharge_pipeline.processor.exceptions import (
    DocumentValidationError,
    PipelineError,
    ProviderError,
)
from discharge_pipeline.processor.pipeline import (
    PipelineContext,
    PipelineStep,
    SimplificationContext,
    TranslationContext,
)
from discharge_pipeline.processor.retry import RetryPolicy
from discharge_pipeline.processor.steps import (
    CheckSourceStep,
    LoadRawDocumentStep,
    MarkProcessingStep,
    NormalizeSectionsStep,
    PublishCompletionStep,
    RecordSimplifiedStep,
    ResolveTargetLanguageStep,
    SimplifyStep,
    TranslateArtifactsStep,
    ValidateDocumentStep,
    WriteBackStep,
    WriteSimplifiedStep,
)
from discharge_pipeline.simplification.factory import SimplifierFactory
from discharge_pipeline.storage.local_object_store import LocalObjectStore
from discharge_pipeline.tenants.backend_client import BackendClient
from discharge_pipeline.tenants.factory import TenantConfigProviderFactory
from discharge_pipeline.translation.factory import TranslatorFactory


class PipelineCoordinator:
    """Routes one inbound event through the simplification or translation steps.

    Terminal failures (validation, safety blocks, rejected input) are logged,
    recorded on the document and swallowed, so the event is acknowledged.
    Retryable provider failures and transport failures propagate so the
    delivery layer redelivers the event. On the final delivery attempt they
    are recorded on the document first, since no redelivery will follow.
    """

    def __init__(
        self,
        *,
        simplification_steps: Sequence[PipelineStep[Any]],
        translation_steps: Sequence[PipelineStep[Any]],
        artifact_store: ArtifactStore,
    ) -> None:
        self._simplification_steps = list(simplification_steps)
        self._translation_steps = list(translation_steps)
        self._artifact_store = artifact_store

    def handle(
        self, topic: str, payload: Any, *, final_attempt: bool = False
    ) -> PipelineContext | None:
        """Handle one delivery. Returns the final context, or None if dropped.

        Args:
            final_attempt: True when the delivery layer will not redeliver
                this event if it fails again.
        """
        try:
            event = decode_event(payload)
        except EventDecodeError as exc:
            Log.error("Dropping undecodable event", topic=topic, error=str(exc))
            return None

        context: PipelineContext
        if isinstance(event, StorageTriggerEvent):
            Log.info("Handling storage trigger", topic=topic, bucket=event.bucket, name=event.name)
            context = SimplificationContext(event=event)
            steps = self._simplification_steps
        else:
            Log.info(
                "Handling completion event",
                topic=topic,
                composition_id=event.composition_id,
                artifacts=len(event.artifacts),
            )
            context = TranslationContext(
                event=event,
                tenant_id=event.tenant_id,
                composition_id=event.composition_id,
            )
            steps = self._translation_steps
        return self._run(steps, context, final_attempt)

    def _run(
        self,
        steps: list[PipelineStep[Any]],
        context: PipelineContext,
        final_attempt: bool,
    ) -> PipelineContext:
        try:
            for step in steps:
                context = step.run(context)
                if context.stopped:
                    Log.info(f"Pipeline stopped at {type(step).__name__}", reason=context.stop_reason)
                    break
        except DocumentValidationError as exc:
            self._record_terminal_failure(context, "Validation failed", exc)
        except ProviderError as exc:
            if exc.retryable:
                self._handle_redeliverable_failure(context, exc, final_attempt)
                raise
            self._record_terminal_failure(context, "Processing failed", exc)
        except PipelineError as exc:
            self._handle_redeliverable_failure(context, exc, final_attempt)
            raise
        return context

    def _handle_redeliverable_failure(
        self, context: PipelineContext, exc: PipelineError, final_attempt: bool
    ) -> None:
        if not final_attempt:
            Log.warning(
                "Retryable failure, event will be redelivered",
                natural_key=context.natural_key,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return
        message = f"Processing failed after final delivery attempt: {exc}"
        Log.error(message, natural_key=context.natural_key, composition_id=context.composition_id)
        self._record_failure(context, message)

    def _record_terminal_failure(
        self, context: PipelineContext, prefix: str, exc: Exception
    ) -> None:
        message = f"{prefix}: {exc}"
        Log.error(message, natural_key=context.natural_key, composition_id=context.composition_id)
        context.stop("terminal_failure")
        self._record_failure(context, message)

    def _record_failure(self, context: PipelineContext, message: str) -> None:
        if context.natural_key:
            self._artifact_store.record_stage_failed(
                context.natural_key,
                message,
                tenant_id=context.tenant_id or None,
                composition_id=context.composition_id or None,
            )


def build_coordinator(settings: Settings) -> PipelineCoordinator:
    """Build a PipelineCoordinator with all required adapters."""
    max_file_size_bytes = settings.max_file_size_mb * 1024 * 1024
    retry_policy = RetryPolicy(
        max_attempts=settings.max_retries,
        base_delay_seconds=settings.retry_delay_seconds,
    )
    artifact_store = ArtifactStore(
        LocalObjectStore(settings.storage_root),
        DischargeDocumentsRepository(),
    )
    publisher = EventPublisher(
        EventRepository(settings.max_delivery_attempts),
        completion_topic=settings.completion_topic,
        raw_upload_topic=settings.raw_upload_topic,
    )
    backend_client = (
        BackendClient(
            base_url=settings.backend_api_url,
            timeout_seconds=settings.backend_timeout_seconds,
        )
        if settings.write_back_enabled
        else None
    )

    simplification_steps: list[PipelineStep[Any]] = [
        CheckSourceStep(
            raw_bucket=settings.raw_bucket,
            allowed_extensions=settings.allowed_file_extensions,
            max_file_size_bytes=max_file_size_bytes,
            default_tenant_id=settings.default_tenant_id,
            scheme=settings.storage_scheme,
        ),
        LoadRawDocumentStep(artifact_store, max_file_size_bytes),
        MarkProcessingStep(artifact_store),
        ValidateDocumentStep(),
        SimplifyStep(SimplifierFactory.create(settings, retry_policy)),
        NormalizeSectionsStep(SectionNormalizer()),
        WriteSimplifiedStep(artifact_store, settings.simplified_bucket),
        RecordSimplifiedStep(artifact_store),
        PublishCompletionStep(publisher),
    ]
    translation_steps: list[PipelineStep[Any]] = [
        ResolveTargetLanguageStep(
            TenantConfigProviderFactory.create(settings), settings.source_language
        ),
        TranslateArtifactsStep(
            artifact_store=artifact_store,
            translator=TranslatorFactory.create(settings, retry_policy),
            raw_bucket=settings.raw_bucket,
            simplified_bucket=settings.simplified_bucket,
            translated_bucket=settings.translated_bucket,
            scheme=settings.storage_scheme,
        ),
        WriteBackStep(backend_client),
    ]
    return PipelineCoordinator(
        simplification_steps=simplification_steps,
        translation_steps=translation_steps,
        artifact_store=artifact_store,
    )
