from datetime import UTC, datetime
from pathlib import PurePosixPath

from discharge_pipeline.artifacts.artifact_store import ArtifactStore
from discharge_pipeline.database.models import (
    STATUS_SIMPLIFIED,
    STATUS_TRANSLATED,
    DocumentUpdate,
)
from discharge_pipeline.events.models import ArtifactDescriptor, CompletionEvent
from discharge_pipeline.events.publisher import EventPublisher
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.normalization.section_normalizer import SectionNormalizer
from discharge_pipeline.processor.exceptions import (
    DocumentValidationError,
    ProviderError,
    TransportError,
)
from discharge_pipeline.processor.pipeline import (
    PipelineStep,
    SimplificationContext,
    TranslationContext,
    require,
)
from discharge_pipeline.processor.validator import is_likely_medical_document
from discharge_pipeline.simplification.simplifier import Simplifier
from discharge_pipeline.storage.locations import (
    KIND_SUMMARY,
    ObjectLocation,
    document_type,
    kind_for_key,
    parse_location,
    parse_raw_name,
    simplified_key,
    translated_key,
)
from discharge_pipeline.tenants.backend_client import BackendClient
from discharge_pipeline.tenants.base import BaseTenantConfigProvider
from discharge_pipeline.tenants.models import TranslatedContent, WriteBackPayload
from discharge_pipeline.translation.language_resolver import resolve_target_language
from discharge_pipeline.translation.translator import Translator


class CheckSourceStep(PipelineStep[SimplificationContext]):
    """Decides whether a storage object is a raw document this pipeline owns."""

    def __init__(
        self,
        *,
        raw_bucket: str,
        allowed_extensions: list[str],
        max_file_size_bytes: int,
        default_tenant_id: str,
        scheme: str,
    ) -> None:
        self._raw_bucket = raw_bucket
        self._allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self._max_file_size_bytes = max_file_size_bytes
        self._default_tenant_id = default_tenant_id
        self._scheme = scheme

    def run(self, context: SimplificationContext) -> SimplificationContext:
        event = context.event
        if event.bucket != self._raw_bucket:
            Log.info("Ignoring object outside the raw bucket", bucket=event.bucket, name=event.name)
            context.stop("other_bucket")
            return context

        source = ObjectLocation(bucket=event.bucket, key=event.name, scheme=self._scheme)
        if source.extension not in self._allowed_extensions:
            Log.info("Ignoring object with unsupported extension", location=source.uri)
            context.stop("unsupported_extension")
            return context

        parsed = parse_raw_name(source.key)
        metadata = event.metadata
        context.source = source
        context.natural_key = source.uri
        context.tenant_id = metadata.tenant_id or self._default_tenant_id
        context.composition_id = (
            metadata.composition_id
            or (parsed[0] if parsed else PurePosixPath(source.key).stem)
        )
        context.kind = parsed[1] if parsed else kind_for_key(source.key)
        context.patient_id = metadata.patient_id
        context.preferred_language = metadata.preferred_language

        if event.size is not None and event.size > self._max_file_size_bytes:
            raise DocumentValidationError(
                f"File too large: {event.size} bytes exceeds {self._max_file_size_bytes}"
            )
        return context


class LoadRawDocumentStep(PipelineStep[SimplificationContext]):
    def __init__(self, artifact_store: ArtifactStore, max_file_size_bytes: int) -> None:
        self._artifact_store = artifact_store
        self._max_file_size_bytes = max_file_size_bytes

    def run(self, context: SimplificationContext) -> SimplificationContext:
        source = require(context.source, "source")
        data = self._artifact_store.read_artifact(source)
        if len(data) > self._max_file_size_bytes:
            raise DocumentValidationError(
                f"File too large: {len(data)} bytes exceeds {self._max_file_size_bytes}"
            )
        try:
            context.raw_text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentValidationError(f"File is not UTF-8 text: {exc}") from exc
        Log.info("Loaded raw document", location=source.uri, size=len(data))
        return context


class MarkProcessingStep(PipelineStep[SimplificationContext]):
    def __init__(self, artifact_store: ArtifactStore) -> None:
        self._artifact_store = artifact_store

    def run(self, context: SimplificationContext) -> SimplificationContext:
        self._artifact_store.record_processing(
            context.natural_key,
            DocumentUpdate(
                tenant_id=context.tenant_id,
                composition_id=context.composition_id,
                raw_location=context.natural_key,
            ),
        )
        return context


class ValidateDocumentStep(PipelineStep[SimplificationContext]):
    def run(self, context: SimplificationContext) -> SimplificationContext:
        if not context.raw_text.strip():
            raise DocumentValidationError("Document is empty")
        if not is_likely_medical_document(context.raw_text):
            raise DocumentValidationError(
                "Content does not appear to be a medical discharge summary"
            )
        return context


class SimplifyStep(PipelineStep[SimplificationContext]):
    def __init__(self, simplifier: Simplifier) -> None:
        self._simplifier = simplifier

    def run(self, context: SimplificationContext) -> SimplificationContext:
        source = require(context.source, "source")
        context.simplification = self._simplifier.simplify(context.raw_text, source.file_name)
        return context


class NormalizeSectionsStep(PipelineStep[SimplificationContext]):
    def __init__(self, normalizer: SectionNormalizer) -> None:
        self._normalizer = normalizer

    def run(self, context: SimplificationContext) -> SimplificationContext:
        simplification = require(context.simplification, "simplification")
        context.normalized_text = self._normalizer.normalize(simplification.simplified_text)
        return context


class WriteSimplifiedStep(PipelineStep[SimplificationContext]):
    def __init__(self, artifact_store: ArtifactStore, simplified_bucket: str) -> None:
        self._artifact_store = artifact_store
        self._simplified_bucket = simplified_bucket

    def run(self, context: SimplificationContext) -> SimplificationContext:
        source = require(context.source, "source")
        location = ObjectLocation(
            bucket=self._simplified_bucket,
            key=simplified_key(source.key),
            scheme=source.scheme,
        )
        context.simplified_location = self._artifact_store.write_artifact(
            location, context.normalized_text
        )
        return context


class RecordSimplifiedStep(PipelineStep[SimplificationContext]):
    def __init__(self, artifact_store: ArtifactStore) -> None:
        self._artifact_store = artifact_store

    def run(self, context: SimplificationContext) -> SimplificationContext:
        simplified_location = require(context.simplified_location, "simplified_location")
        self._artifact_store.record_stage_complete(
            context.natural_key,
            DocumentUpdate(
                tenant_id=context.tenant_id,
                composition_id=context.composition_id,
                raw_location=context.natural_key,
                status=STATUS_SIMPLIFIED,
                simplified_location=simplified_location.uri,
            ),
        )
        return context


class PublishCompletionStep(PipelineStep[SimplificationContext]):
    def __init__(self, publisher: EventPublisher) -> None:
        self._publisher = publisher

    def run(self, context: SimplificationContext) -> SimplificationContext:
        source = require(context.source, "source")
        simplified_location = require(context.simplified_location, "simplified_location")
        tokens_used = context.simplification.tokens_used if context.simplification else None
        event = CompletionEvent(
            tenant_id=context.tenant_id,
            composition_id=context.composition_id,
            artifacts=(
                ArtifactDescriptor(
                    type=document_type(context.kind or KIND_SUMMARY),
                    original_path=source.uri,
                    simplified_path=simplified_location.uri,
                    language="en",
                ),
            ),
            processing_time_ms=context.elapsed_ms(),
            tokens_used=tokens_used or 0,
            timestamp=datetime.now(UTC).isoformat(),
            patient_id=context.patient_id,
            preferred_language=context.preferred_language,
        )
        context.message_id = self._publisher.publish(event)
        return context


class ResolveTargetLanguageStep(PipelineStep[TranslationContext]):
    def __init__(self, tenant_provider: BaseTenantConfigProvider, source_language: str) -> None:
        self._tenant_provider = tenant_provider
        self._source_language = source_language

    def run(self, context: TranslationContext) -> TranslationContext:
        context.tenant_config = self._tenant_provider.get_config(context.tenant_id)
        resolution = resolve_target_language(
            context.tenant_config,
            context.event.preferred_language,
            self._source_language,
        )
        if resolution.target_language is None:
            Log.info(
                "Translation skipped",
                composition_id=context.composition_id,
                reason=resolution.reason,
            )
            context.stop(resolution.reason)
            return context
        context.target_language = resolution.target_language
        return context


class TranslateArtifactsStep(PipelineStep[TranslationContext]):
    """Translates every artifact of a completion event.

    A terminal failure of one artifact is recorded and the others still run.
    Retryable and transport failures abort the invocation for redelivery.
    """

    def __init__(
        self,
        *,
        artifact_store: ArtifactStore,
        translator: Translator,
        raw_bucket: str,
        simplified_bucket: str,
        translated_bucket: str,
        scheme: str,
    ) -> None:
        self._artifact_store = artifact_store
        self._translator = translator
        self._raw_bucket = raw_bucket
        self._simplified_bucket = simplified_bucket
        self._translated_bucket = translated_bucket
        self._scheme = scheme

    def run(self, context: TranslationContext) -> TranslationContext:
        target = require(context.target_language, "target_language")
        bucket = self._translated_bucket
        if context.tenant_config and context.tenant_config.translated_bucket:
            bucket = context.tenant_config.translated_bucket

        for artifact in context.event.artifacts:
            natural_key = parse_location(
                artifact.original_path, self._raw_bucket, self._scheme
            ).uri
            simplified = parse_location(
                artifact.simplified_path, self._simplified_bucket, self._scheme
            )
            context.natural_key = natural_key
            try:
                text = self._artifact_store.read_text(simplified)
                result = self._translator.translate(text, simplified.file_name, target)
            except (ProviderError, UnicodeDecodeError) as exc:
                if isinstance(exc, ProviderError) and exc.retryable:
                    raise
                Log.error(
                    "Artifact translation failed",
                    location=simplified.uri,
                    target_language=target,
                    error=str(exc),
                )
                context.failed[simplified.uri] = str(exc)
                self._artifact_store.record_stage_failed(
                    natural_key,
                    f"Translation failed: {exc}",
                    tenant_id=context.tenant_id,
                    composition_id=context.composition_id,
                )
                continue

            location = ObjectLocation(
                bucket=bucket,
                key=translated_key(simplified.key, target),
                scheme=simplified.scheme,
            )
            self._artifact_store.write_artifact(location, result.translated_text)
            self._artifact_store.record_stage_complete(
                natural_key,
                DocumentUpdate(
                    tenant_id=context.tenant_id,
                    composition_id=context.composition_id,
                    raw_location=natural_key,
                    status=STATUS_TRANSLATED,
                    translated_locations={target: location.uri},
                ),
            )
            context.translated.append(
                TranslatedContent(
                    kind=_write_back_kind(artifact.type),
                    content=result.translated_text,
                    language=target,
                    location=location.uri,
                )
            )

        context.natural_key = ""
        Log.info(
            "Translation finished",
            composition_id=context.composition_id,
            target_language=target,
            translated=len(context.translated),
            failed=len(context.failed),
        )
        return context


class WriteBackStep(PipelineStep[TranslationContext]):
    """Sends translated documents to the system of record. Best effort."""

    def __init__(self, backend_client: BackendClient | None) -> None:
        self._backend_client = backend_client

    def run(self, context: TranslationContext) -> TranslationContext:
        if self._backend_client is None or not context.translated:
            return context
        payload = WriteBackPayload(tenant_id=context.tenant_id, documents=context.translated)
        try:
            self._backend_client.write_translated(
                context.composition_id, context.tenant_id, payload
            )
        except TransportError as exc:
            Log.warning(
                "Write-back to system of record failed",
                composition_id=context.composition_id,
                error=str(exc),
            )
        return context


def _write_back_kind(artifact_type: str) -> str:
    if artifact_type.endswith("instructions"):
        return "dischargeInstructions"
    return "dischargeSummary"
