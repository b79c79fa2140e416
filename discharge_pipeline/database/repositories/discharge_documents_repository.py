from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from discharge_pipeline.database.connection import get_connection
from discharge_pipeline.database.models import (
    STATUS_ERROR,
    STATUS_RANK,
    STATUS_RAW_ONLY,
    STATUS_SIMPLIFIED,
    STATUS_TRANSLATED,
    DischargeDocumentRecord,
    DocumentUpdate,
)

_COLUMNS = """
    id, natural_key, tenant_id, composition_id, raw_location, status,
    simplified_location, translated_locations, error_message,
    created_at, updated_at, simplified_at, translated_at
"""


def implied_status(record: DischargeDocumentRecord) -> str:
    """Highest lifecycle status the record's stored artifacts prove."""
    if record.translated_locations:
        return STATUS_TRANSLATED
    if record.simplified_location:
        return STATUS_SIMPLIFIED
    return STATUS_RAW_ONLY


def merge_document(
    existing: DischargeDocumentRecord,
    update: DocumentUpdate,
    now: datetime,
) -> DischargeDocumentRecord:
    """Merge a stage update into a stored record without losing progress.

    * status never moves backwards along raw_only -> processing ->
      simplified -> translated;
    * ``error`` can be set from any status and keeps every recorded location;
      a later stage update recovers from it;
    * translated locations are added or replaced per language, never removed;
    * ``created_at`` is kept and ``updated_at`` becomes *now*.
    """
    translated = dict(existing.translated_locations)
    translated.update(update.translated_locations)

    merged = replace(
        existing,
        tenant_id=existing.tenant_id or update.tenant_id or "",
        composition_id=existing.composition_id or update.composition_id or "",
        raw_location=existing.raw_location or update.raw_location or "",
        simplified_location=update.simplified_location or existing.simplified_location,
        translated_locations=translated,
        updated_at=now,
    )

    if update.status == STATUS_ERROR:
        merged.status = STATUS_ERROR
        merged.error_message = update.error_message
        return merged

    if update.simplified_location:
        merged.simplified_at = now
    if update.translated_locations:
        merged.translated_at = now

    if update.status is None:
        if existing.status == STATUS_ERROR and (
            update.simplified_location or update.translated_locations
        ):
            merged.status = implied_status(merged)
            merged.error_message = None
        return merged

    current = implied_status(existing) if existing.status == STATUS_ERROR else existing.status
    if STATUS_RANK[update.status] > STATUS_RANK[current]:
        merged.status = update.status
    else:
        merged.status = current
    merged.error_message = None
    return merged


def _record_from_row(row: dict[str, Any]) -> DischargeDocumentRecord:
    return DischargeDocumentRecord(
        id=row["id"],
        natural_key=row["natural_key"],
        tenant_id=row["tenant_id"],
        composition_id=row["composition_id"],
        raw_location=row["raw_location"],
        status=row["status"],
        simplified_location=row["simplified_location"],
        translated_locations=dict(row["translated_locations"] or {}),
        error_message=row["error_message"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        simplified_at=row["simplified_at"],
        translated_at=row["translated_at"],
    )


class DischargeDocumentsRepository:
    """Database operations for the discharge_documents table."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def upsert(self, natural_key: str, update: DocumentUpdate) -> DischargeDocumentRecord:
        """Create the record if absent, then merge *update* into it.

        Runs in one transaction with the row locked, so concurrent
        redeliveries of the same event serialize on the natural key.
        """
        now = self._clock()
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO discharge_documents
                        (natural_key, tenant_id, composition_id, raw_location,
                         status, created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s)
                    ON CONFLICT (natural_key) DO NOTHING
                    """,
                    (
                        natural_key,
                        update.tenant_id or "",
                        update.composition_id or "",
                        update.raw_location or natural_key,
                        STATUS_RAW_ONLY,
                        now,
                        now,
                    ),
                )
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM discharge_documents
                    WHERE natural_key = %s
                    FOR UPDATE
                    """,
                    (natural_key,),
                )
                row = cur.fetchone()
                if row is None:
                    raise RuntimeError(f"Upserted document {natural_key} vanished")

                merged = merge_document(_record_from_row(row), update, now)
                cur.execute(
                    """
                    UPDATE discharge_documents
                    SET tenant_id = %s,
                        composition_id = %s,
                        raw_location = %s,
                        status = %s,
                        simplified_location = %s,
                        translated_locations = %s,
                        error_message = %s,
                        updated_at = %s,
                        simplified_at = %s,
                        translated_at = %s
                    WHERE id = %s
                    """,
                    (
                        merged.tenant_id,
                        merged.composition_id,
                        merged.raw_location,
                        merged.status,
                        merged.simplified_location,
                        Jsonb(merged.translated_locations),
                        merged.error_message,
                        merged.updated_at,
                        merged.simplified_at,
                        merged.translated_at,
                        merged.id,
                    ),
                )
            conn.commit()
        return merged

    def find_by_natural_key(self, natural_key: str) -> DischargeDocumentRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM discharge_documents WHERE natural_key = %s",
                    (natural_key,),
                )
                row = cur.fetchone()
        if row is None:
            return None
        return _record_from_row(row)

    def find_by_composition(
        self, tenant_id: str, composition_id: str
    ) -> list[DischargeDocumentRecord]:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM discharge_documents
                    WHERE tenant_id = %s AND composition_id = %s
                    ORDER BY natural_key
                    """,
                    (tenant_id, composition_id),
                )
                rows = cur.fetchall()
        return [_record_from_row(row) for row in rows]
