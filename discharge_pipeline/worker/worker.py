import time
from collections import Counter

import psycopg

from discharge_pipeline.config.settings import Settings
from discharge_pipeline.database.connection import get_connection
from discharge_pipeline.database.models import EventRecord
from discharge_pipeline.database.repositories.event_repository import EventRepository
from discharge_pipeline.logging.logger import Log
from discharge_pipeline.worker.event_runner import EventRunner


class Worker:
    """Poll loop: claim -> dispatch -> idle.

    Idles for the poll interval when the event bus is empty. While the bus
    cannot be reached the idle time doubles per consecutive failure, capped at
    ``event_poll_max_backoff_seconds``.
    """

    def __init__(
        self,
        event_repo: EventRepository,
        event_runner: EventRunner,
        settings: Settings,
    ) -> None:
        self._event_repo = event_repo
        self._event_runner = event_runner
        self._settings = settings
        self._stop_requested = False
        self.handled: Counter[str] = Counter()

    def stop(self) -> None:
        """Ask the loop to exit once the current event is done."""
        self._stop_requested = True

    def run(self, max_events: int | None = None) -> int:
        """Poll until stopped or interrupted. Returns the number of events handled.

        If max_events is set, stop after handling that many events.
        """
        Log.info(
            "Worker started",
            poll_interval=self._settings.event_poll_interval_seconds,
            max_events=max_events,
        )
        handled = 0
        claim_failures = 0
        try:
            while not self._stop_requested and (max_events is None or handled < max_events):
                try:
                    event = self._claim_event()
                except (psycopg.Error, RuntimeError) as exc:
                    claim_failures += 1
                    delay = self.backoff_seconds(claim_failures)
                    Log.warning(
                        "Event bus unavailable, backing off",
                        failures=claim_failures,
                        delay_seconds=delay,
                        error=str(exc),
                    )
                    time.sleep(delay)
                    continue

                claim_failures = 0
                if event is None:
                    Log.debug("No events available, sleeping")
                    time.sleep(self._settings.event_poll_interval_seconds)
                    continue

                self._event_runner.run(event)
                self.handled[event.topic] += 1
                handled += 1
        except KeyboardInterrupt:
            Log.info("Worker interrupted")
        Log.info("Worker stopped", handled=handled, by_topic=dict(self.handled))
        return handled

    def backoff_seconds(self, failures: int) -> float:
        interval = self._settings.event_poll_interval_seconds
        return min(interval * 2 ** (failures - 1), self._settings.event_poll_max_backoff_seconds)

    def _claim_event(self) -> EventRecord | None:
        with get_connection() as conn:
            return self._event_repo.claim_next_event(conn)
