"""Structured logging — JSON formatter output.

Invariants:
    - Base keys always present; extra fields only when set on the record
"""

import json
import logging

from student_registry.infrastructure.observability import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "student_registry.test", logging.INFO, __file__, 1, "Import completed", None, None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_base_keys():
    payload = json.loads(JSONFormatter().format(_record()))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "student_registry.test"
    assert payload["message"] == "Import completed"
    assert "timestamp" in payload
    assert "accepted" not in payload


def test_json_formatter_includes_known_extras_only():
    payload = json.loads(JSONFormatter().format(
        _record(accepted=2, duplicates=1, enrollment_number="C14230001", unrelated="x"),
    ))
    assert payload["accepted"] == 2
    assert payload["duplicates"] == 1
    assert payload["enrollment_number"] == "C14230001"
    assert "unrelated" not in payload
