from discharge_pipeline.config.settings import Settings
from discharge_pipeline.database.models import EventRecord
from discharge_pipeline.database.repositories.event_repository import EventRepository
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.processor.coordinator import PipelineCoordinator
from discharge_pipeline.processor.exceptions import PipelineError


class EventRunner:
    """Run one event delivery, catch exceptions, and apply redelivery logic."""

    def __init__(
        self,
        coordinator: PipelineCoordinator,
        event_repo: EventRepository,
        settings: Settings,
    ) -> None:
        self._coordinator = coordinator
        self._event_repo = event_repo
        self._settings = settings

    def run(self, event: EventRecord) -> None:
        """Execute a single delivery with error handling."""
        attempt = event.attempts + 1
        final_attempt = attempt >= self._settings.max_delivery_attempts
        Log.info(f"Running event {event.id} on {event.topic} (attempt {attempt})")
        try:
            self._coordinator.handle(event.topic, event.payload, final_attempt=final_attempt)
            self._event_repo.mark_done(event.id)
            Log.info(f"Event {event.id} completed successfully")
        except PipelineError as exc:
            Log.error(f"Event {event.id} failed: {exc}")
            self._handle_failure(event, exc)
        except Exception as exc:
            Log.exception(f"Event {event.id} failed unexpectedly: {exc}")
            self._handle_failure(event, exc)

    def _handle_failure(self, event: EventRecord, exc: Exception) -> None:
        """Dead-letter at max attempts, otherwise return to pending with a delay."""
        attempt = event.attempts + 1
        if attempt >= self._settings.max_delivery_attempts:
            self._event_repo.mark_failed(event.id, str(exc))
            Log.error(f"Event {event.id} dead-lettered after {attempt} attempts")
        else:
            delay = self._settings.retry_delay_seconds * attempt
            self._event_repo.release_for_retry(event.id, str(exc), delay_seconds=delay)
            Log.warning(f"Event {event.id} will be redelivered in {delay:.1f}s (attempt {attempt})")
