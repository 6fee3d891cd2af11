"""Structured Logging — JSON formatter fields and idempotent handler setup."""

import json
import logging

from fango.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "fango.services.ranking_chain", logging.INFO, __file__, 1,
        "similarity contributed 3/10", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_includes_base_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "fango.services.ranking_chain"
    assert payload["message"] == "similarity contributed 3/10"
    assert "timestamp" in payload


def test_json_includes_extra_fields_when_present():
    payload = json.loads(JSONFormatter().format(_record(
        project_id="p-1", round_number=2, strategy="similarity", contributed=3,
    )))
    assert payload["project_id"] == "p-1"
    assert payload["round_number"] == 2
    assert payload["strategy"] == "similarity"
    assert payload["contributed"] == 3
    assert "error_code" not in payload


def test_json_keeps_japanese_text_readable():
    record = _record()
    record.msg = "物件を選択しました"
    assert "物件を選択しました" in JSONFormatter().format(record)


def test_timestamp_is_record_creation_time():
    record = _record()
    record.created = 0.0
    payload = json.loads(JSONFormatter().format(record))
    assert payload["timestamp"] == "1970-01-01T00:00:00+00:00"


def test_setup_logging_replaces_its_handler():
    root = logging.getLogger()
    previous_level = root.level
    first = setup_logging("DEBUG", "json")
    second = setup_logging("WARNING", "text")
    try:
        assert first not in root.handlers
        assert [h for h in root.handlers if h.get_name() == "fango"] == [second]
        assert root.level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
        assert not isinstance(second.formatter, JSONFormatter)
    finally:
        root.removeHandler(second)
        root.setLevel(previous_level)
