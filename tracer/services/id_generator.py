import uuid
from typing import Protocol

from tracer.schemas.trace import TraceId


class TraceIdGenerationError(Exception):
    """Raised when the time-based identifier source cannot produce a value."""


class IdGenerator(Protocol):
    def generate(self) -> TraceId: ...


class TimeUuidGenerator:
    """Generates time-based (version 1) UUIDs as trace ids.

    ``uuid.uuid1`` embeds a 60-bit timestamp, a random clock sequence and the
    node id, and never hands out the same timestamp twice within a process.
    """

    def generate(self) -> TraceId:
        try:
            value = uuid.uuid1()
        except (OSError, ValueError) as exc:
            raise TraceIdGenerationError(f"Failed to generate trace id: {exc}") from exc
        return TraceId(value=str(value))


default_generator = TimeUuidGenerator()
