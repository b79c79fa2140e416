import logging

from discharge_pipeline.logging.logger import Log, _FieldsFormatter


def _record(fields: dict[str, object]) -> logging.LogRecord:
    record = logging.LogRecord("discharge_pipeline", logging.INFO, __file__, 1, "Done", None, None)
    record.fields = fields
    return record


class TestFieldsFormatter:
    def test_appends_fields(self) -> None:
        formatter = _FieldsFormatter("%(message)s")
        line = formatter.format(_record({"composition_id": "c1", "attempts": 2}))
        assert line == "Done composition_id='c1' attempts=2"

    def test_plain_message_without_fields(self) -> None:
        assert _FieldsFormatter("%(message)s").format(_record({})) == "Done"


class TestLog:
    def test_passes_fields_to_logger(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="discharge_pipeline"):
            Log.info("Artifact written", location="local://b/k.txt")

        record = caplog.records[-1]
        assert record.getMessage() == "Artifact written"
        assert record.fields == {"location": "local://b/k.txt"}

    def test_exception_attaches_traceback(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="discharge_pipeline"):
            try:
                raise KeyError("slot")
            except KeyError:
                Log.exception("Event failed unexpectedly", event_id=3)

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.exc_info is not None and record.exc_info[0] is KeyError
        assert record.fields == {"event_id": 3}
