import pytest

from discharge_pipeline.storage.locations import (
    ObjectLocation,
    document_type,
    kind_for_key,
    parse_location,
    parse_raw_name,
    raw_key,
    simplified_key,
    translated_key,
)


class TestObjectLocation:
    def test_uri(self) -> None:
        location = ObjectLocation("raw", "c1-discharge-summary.txt", scheme="gs")
        assert location.uri == "gs://raw/c1-discharge-summary.txt"

    def test_file_name_and_extension(self) -> None:
        location = ObjectLocation("raw", "nested/dir/Doc.MD")
        assert location.file_name == "Doc.MD"
        assert location.extension == ".md"

    def test_relocate_keeps_key(self) -> None:
        location = ObjectLocation("a", "k.txt").relocate("b")
        assert location == ObjectLocation("b", "k.txt")


class TestParseLocation:
    def test_parses_full_uri(self) -> None:
        location = parse_location("gs://bucket-x/path/to/file.txt", "default")
        assert location == ObjectLocation("bucket-x", "path/to/file.txt", scheme="gs")

    def test_bare_key_goes_to_default_bucket(self) -> None:
        location = parse_location("file.txt", "default", scheme="local")
        assert location.uri == "local://default/file.txt"

    def test_leading_slash_is_dropped(self) -> None:
        assert parse_location("/file.txt", "default").key == "file.txt"

    def test_empty_value_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_location("  ", "default")


class TestDeterministicKeys:
    def test_raw_key(self) -> None:
        assert raw_key("comp-1", "summary") == "comp-1-discharge-summary.txt"

    def test_raw_key_rejects_unknown_kind(self) -> None:
        with pytest.raises(ValueError):
            raw_key("comp-1", "letter")

    def test_simplified_key(self) -> None:
        assert simplified_key("comp-1-discharge-summary.txt") == (
            "comp-1-discharge-summary-simplified.txt"
        )

    def test_simplified_key_is_stable_on_simplified_input(self) -> None:
        key = simplified_key("comp-1-discharge-summary.txt")
        assert simplified_key(key) == key

    def test_translated_key_from_simplified_key(self) -> None:
        assert translated_key("comp-1-discharge-summary-simplified.txt", "es") == (
            "comp-1-discharge-summary-simplified-es.txt"
        )

    def test_translated_key_from_raw_key(self) -> None:
        assert translated_key("comp-1-discharge-instructions.txt", "fr") == (
            "comp-1-discharge-instructions-simplified-fr.txt"
        )


class TestRawNames:
    def test_parse_raw_name(self) -> None:
        assert parse_raw_name("comp-1-discharge-instructions.txt") == ("comp-1", "instructions")

    def test_parse_raw_name_rejects_other_names(self) -> None:
        assert parse_raw_name("notes.txt") is None

    def test_kind_for_key(self) -> None:
        assert kind_for_key("x/Discharge-Summary.md") == "summary"
        assert kind_for_key("other.txt") is None

    def test_document_type(self) -> None:
        assert document_type("summary") == "discharge-summary"
