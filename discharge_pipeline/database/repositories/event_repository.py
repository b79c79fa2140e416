from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from discharge_pipeline.database.connection import get_connection
from discharge_pipeline.database.models import (
    EVENT_DONE,
    EVENT_FAILED,
    EVENT_PENDING,
    EVENT_PROCESSING,
    EventRecord,
)


class EventRepository:
    """Database operations for the pipeline_events table.

    The table is the pipeline's at-least-once event bus: publishers append,
    workers claim with SKIP LOCKED, failed deliveries go back to pending until
    they run out of attempts and are dead-lettered as ``failed``.
    """

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def append(self, topic: str, payload: dict[str, Any]) -> int:
        """Append an event and return its id."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO pipeline_events (topic, payload, status, attempts)
                    VALUES (%s, %s, %s, 0)
                    RETURNING id
                    """,
                    (topic, Jsonb(payload), EVENT_PENDING),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise RuntimeError(f"Event insert on {topic} returned no id")
        return int(row[0])

    def claim_next_event(self, conn: psycopg.Connection[Any]) -> EventRecord | None:
        """Claim the next pending event using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, topic, payload, attempts
                FROM pipeline_events
                WHERE status = %s
                  AND attempts < %s
                  AND available_at <= NOW()
                ORDER BY created_at, id
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (EVENT_PENDING, self._max_attempts),
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        conn.execute(
            """
            UPDATE pipeline_events
            SET status = %s, locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (EVENT_PROCESSING, row["id"]),
        )
        conn.commit()

        return EventRecord(
            id=row["id"],
            topic=row["topic"],
            payload=row["payload"],
            status=EVENT_PROCESSING,
            attempts=row["attempts"],
        )

    def mark_done(self, event_id: int) -> None:
        """Mark an event as delivered."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE pipeline_events
                SET status = %s, error_message = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (EVENT_DONE, event_id),
            )
            conn.commit()

    def mark_failed(self, event_id: int, error: str) -> None:
        """Dead-letter an event after its final failed delivery."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE pipeline_events
                SET status = %s, attempts = attempts + 1,
                    error_message = %s, locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (EVENT_FAILED, error, event_id),
            )
            conn.commit()

    def release_for_retry(self, event_id: int, error: str, delay_seconds: float = 0.0) -> None:
        """Increment attempt count and return the event to pending for redelivery."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE pipeline_events
                SET attempts = attempts + 1, status = %s, error_message = %s,
                    locked_at = NULL,
                    available_at = NOW() + make_interval(secs => %s),
                    updated_at = NOW()
                WHERE id = %s
                """,
                (EVENT_PENDING, error, delay_seconds, event_id),
            )
            conn.commit()

    def find_by_id(self, event_id: int) -> EventRecord | None:
        """Find an event by ID. Useful for tests."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, topic, payload, status, attempts,
                           error_message, locked_at, created_at, updated_at
                    FROM pipeline_events
                    WHERE id = %s
                    """,
                    (event_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return EventRecord(
            id=row["id"],
            topic=row["topic"],
            payload=row["payload"],
            status=row["status"],
            attempts=row["attempts"],
            error_message=row["error_message"],
            locked_at=row["locked_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
