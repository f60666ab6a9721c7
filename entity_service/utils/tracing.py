"""
Diagnostic tracing for service operations.

A `Tracer` is created per operation call with a source label such as
``"widgets.update"`` and emits DEBUG records for four event kinds:
entry (arguments), step (what is about to happen), value (intermediate
results) and exit (return value). Records go to the ``entity_service.trace``
logger with ``trace_source`` and ``trace_event`` extras so the JSON formatter
can index them.

Tracing is observational only. Nothing is rendered unless DEBUG is enabled,
and a value that cannot be rendered is replaced with its ``repr``.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Optional

from entity_service.utils.logging import get_logger

_trace_log = get_logger("entity_service.trace")


class TraceEvent(str, Enum):
    ENTRY = "entry"
    STEP = "step"
    VALUE = "value"
    EXIT = "exit"


def _render(values: dict[str, Any]) -> str:
    parts = []
    for name, value in values.items():
        try:
            rendered = json.dumps(value, default=str, sort_keys=True)
        except (TypeError, ValueError):
            rendered = repr(value)
        parts.append(f"{name}={rendered}")
    return ";".join(parts)


class Tracer:
    """Emit entry/step/value/exit events tagged with a source label."""

    def __init__(self, source: str, logger: Optional[logging.Logger] = None) -> None:
        self.source = source
        self._log = logger or _trace_log

    def _write(self, event: TraceEvent, message: str) -> None:
        self._log.debug(
            "%s %s %s",
            self.source,
            event.value,
            message,
            extra={"trace_source": self.source, "trace_event": event.value},
        )

    def entry(self, **values: Any) -> None:
        if self._log.isEnabledFor(logging.DEBUG):
            self._write(TraceEvent.ENTRY, _render(values))

    def step(self, message: str) -> None:
        if self._log.isEnabledFor(logging.DEBUG):
            self._write(TraceEvent.STEP, message)

    def value(self, **values: Any) -> None:
        if self._log.isEnabledFor(logging.DEBUG):
            self._write(TraceEvent.VALUE, _render(values))

    def exit(self, **values: Any) -> None:
        if self._log.isEnabledFor(logging.DEBUG):
            self._write(TraceEvent.EXIT, _render(values))


__all__ = ["TraceEvent", "Tracer"]
