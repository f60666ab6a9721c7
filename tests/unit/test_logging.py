from __future__ import annotations

import json
import logging

from entity_service.utils.logging import _json_formatter
from entity_service.utils.tracing import Tracer

EXPECTED_ROW_COUNT = 10


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record(row_count=EXPECTED_ROW_COUNT, table="widgets")

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["row_count"] == EXPECTED_ROW_COUNT
    assert payload["table"] == "widgets"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record(extra={"table": "widgets"})

    payload = json.loads(_json_formatter(record))

    assert payload["table"] == "widgets"


def test_tracer_emits_tagged_debug_events(caplog) -> None:
    tracer = Tracer("widgets.update")

    with caplog.at_level(logging.DEBUG, logger="entity_service.trace"):
        tracer.entry(primary_key={"id": 1})
        tracer.step("Updating row...")
        tracer.exit()

    events = [(r.trace_source, r.trace_event) for r in caplog.records]
    assert events == [
        ("widgets.update", "entry"),
        ("widgets.update", "step"),
        ("widgets.update", "exit"),
    ]
    assert 'primary_key={"id": 1}' in caplog.records[0].getMessage()


def test_tracer_is_silent_above_debug(caplog) -> None:
    tracer = Tracer("widgets.create")

    with caplog.at_level(logging.INFO, logger="entity_service.trace"):
        tracer.value(row={"id": 1})

    assert caplog.records == []


def test_tracer_renders_unserializable_values(caplog) -> None:
    class _Opaque:
        def __repr__(self) -> str:
            return "<opaque>"

    tracer = Tracer("widgets.create")

    with caplog.at_level(logging.DEBUG, logger="entity_service.trace"):
        tracer.value(item=_Opaque(), count=float("nan"))

    message = caplog.records[0].getMessage()
    assert 'item="<opaque>"' in message
