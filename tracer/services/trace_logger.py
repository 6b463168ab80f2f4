from typing import Protocol

import structlog

from tracer.schemas.trace import TraceId

_ESCAPES = {"\r": "\\r", "\n": "\\n", "\t": "\\t"}


def escape_control_chars(text: str) -> str:
    """Escape characters that would let a header value forge extra log lines."""
    return "".join(
        ch if ch.isprintable() else _ESCAPES.get(ch, f"\\x{ord(ch):02x}")
        for ch in text
    )


class TraceLogger(Protocol):
    def info(self, trace_id: TraceId, message: str) -> None: ...

    def warn(self, trace_id: TraceId, message: str) -> None: ...

    def error(self, trace_id: TraceId, message: str) -> None: ...


class StructlogTraceLogger:
    """Emits ``[Trace-Id] - [<id>] - <message>`` events through structlog."""

    def __init__(self, name: str = "tracer") -> None:
        self.logger = structlog.get_logger(name)

    def info(self, trace_id: TraceId, message: str) -> None:
        self.logger.info(self._format(trace_id, message), trace_id=trace_id.value)

    def warn(self, trace_id: TraceId, message: str) -> None:
        self.logger.warning(self._format(trace_id, message), trace_id=trace_id.value)

    def error(self, trace_id: TraceId, message: str) -> None:
        self.logger.error(self._format(trace_id, message), trace_id=trace_id.value)

    @staticmethod
    def _format(trace_id: TraceId, message: str) -> str:
        return escape_control_chars(f"{trace_id} - {message}")
