from datetime import UTC, datetime, timedelta

import pytest

from discharge_pipeline.database.models import DischargeDocumentRecord, DocumentUpdate
from discharge_pipeline.database.repositories.discharge_documents_repository import (
    implied_status,
    merge_document,
)

T0 = datetime(2026, 1, 1, tzinfo=UTC)
T1 = T0 + timedelta(minutes=1)
T2 = T0 + timedelta(minutes=2)

KEY = "local://raw/c1-discharge-summary.txt"


def _record(**overrides: object) -> DischargeDocumentRecord:
    values: dict[str, object] = {
        "id": 1,
        "natural_key": KEY,
        "tenant_id": "t1",
        "composition_id": "c1",
        "raw_location": KEY,
        "created_at": T0,
        "updated_at": T0,
    }
    values.update(overrides)
    return DischargeDocumentRecord(**values)  # type: ignore[arg-type]


class TestStatusProgression:
    def test_advances_status(self) -> None:
        merged = merge_document(
            _record(status="processing"),
            DocumentUpdate(status="simplified", simplified_location="local://s/x.txt"),
            T1,
        )
        assert merged.status == "simplified"
        assert merged.simplified_location == "local://s/x.txt"
        assert merged.simplified_at == T1

    def test_never_regresses_status(self) -> None:
        merged = merge_document(
            _record(status="translated", translated_locations={"es": "local://t/es.txt"}),
            DocumentUpdate(status="processing"),
            T1,
        )
        assert merged.status == "translated"

    def test_duplicate_update_is_idempotent_except_updated_at(self) -> None:
        update = DocumentUpdate(status="simplified", simplified_location="local://s/x.txt")
        first = merge_document(_record(status="processing"), update, T1)
        second = merge_document(first, update, T2)

        assert second.status == first.status
        assert second.simplified_location == first.simplified_location
        assert second.created_at == T0
        assert second.updated_at == T2
        assert second.id == first.id

    def test_update_without_status_keeps_status(self) -> None:
        merged = merge_document(_record(status="simplified"), DocumentUpdate(), T1)
        assert merged.status == "simplified"
        assert merged.updated_at == T1


class TestErrorHandling:
    def test_error_keeps_locations(self) -> None:
        record = _record(
            status="translated",
            simplified_location="local://s/x.txt",
            translated_locations={"es": "local://t/es.txt"},
        )
        merged = merge_document(
            record, DocumentUpdate(status="error", error_message="boom"), T1
        )
        assert merged.status == "error"
        assert merged.error_message == "boom"
        assert merged.simplified_location == "local://s/x.txt"
        assert merged.translated_locations == {"es": "local://t/es.txt"}

    def test_later_stage_recovers_from_error(self) -> None:
        record = _record(status="error", error_message="boom")
        merged = merge_document(
            record,
            DocumentUpdate(status="simplified", simplified_location="local://s/x.txt"),
            T1,
        )
        assert merged.status == "simplified"
        assert merged.error_message is None

    def test_lower_stage_after_error_uses_artifact_status(self) -> None:
        record = _record(
            status="error", error_message="boom", simplified_location="local://s/x.txt"
        )
        merged = merge_document(record, DocumentUpdate(status="processing"), T1)
        assert merged.status == "simplified"


class TestTranslatedLocations:
    def test_adds_language_without_removing_others(self) -> None:
        record = _record(status="translated", translated_locations={"es": "local://t/es.txt"})
        merged = merge_document(
            record,
            DocumentUpdate(status="translated", translated_locations={"fr": "local://t/fr.txt"}),
            T1,
        )
        assert merged.translated_locations == {
            "es": "local://t/es.txt",
            "fr": "local://t/fr.txt",
        }
        assert merged.translated_at == T1

    def test_does_not_mutate_existing_record(self) -> None:
        record = _record(translated_locations={"es": "a"})
        merge_document(record, DocumentUpdate(translated_locations={"fr": "b"}), T1)
        assert record.translated_locations == {"es": "a"}


class TestFieldBackfill:
    def test_fills_blank_identifiers_from_update(self) -> None:
        record = _record(tenant_id="", composition_id="")
        merged = merge_document(
            record, DocumentUpdate(tenant_id="t9", composition_id="c9"), T1
        )
        assert merged.tenant_id == "t9"
        assert merged.composition_id == "c9"

    def test_keeps_existing_identifiers(self) -> None:
        merged = merge_document(_record(), DocumentUpdate(tenant_id="other"), T1)
        assert merged.tenant_id == "t1"


class TestImpliedStatus:
    @pytest.mark.parametrize(
        ("simplified", "translated", "expected"),
        [
            (None, {}, "raw_only"),
            ("local://s/x.txt", {}, "simplified"),
            ("local://s/x.txt", {"es": "local://t/es.txt"}, "translated"),
        ],
    )
    def test_implied_status(
        self, simplified: str | None, translated: dict[str, str], expected: str
    ) -> None:
        record = _record(simplified_location=simplified, translated_locations=translated)
        assert implied_status(record) == expected


class TestDocumentUpdate:
    def test_rejects_unknown_status(self) -> None:
        with pytest.raises(ValueError):
            DocumentUpdate(status="archived")
