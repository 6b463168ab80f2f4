import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest
from structlog.testing import capture_logs

from tracer.schemas.trace import TraceId
from tracer.services.header_store import HeaderNameStore
from tracer.services.id_generator import TimeUuidGenerator, TraceIdGenerationError
from tracer.services.trace_logger import StructlogTraceLogger, escape_control_chars


def test_trace_id_renders_log_prefix():
    assert str(TraceId(value="abc-123")) == "[Trace-Id] - [abc-123]"
    assert TraceId(value="abc-123") == TraceId(value="abc-123")


def test_generator_produces_time_based_uuids():
    trace_id = TimeUuidGenerator().generate()

    parsed = uuid.UUID(trace_id.value)
    assert parsed.version == 1
    assert str(parsed) == trace_id.value


def test_generator_is_unique_across_threads():
    generator = TimeUuidGenerator()

    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(pool.map(lambda _: generator.generate().value, range(10_000)))

    assert len(set(ids)) == 10_000


def test_generator_wraps_clock_failures(monkeypatch):
    def broken_clock():
        raise OSError("clock unavailable")

    monkeypatch.setattr("tracer.services.id_generator.uuid.uuid1", broken_clock)

    with pytest.raises(TraceIdGenerationError, match="clock unavailable"):
        TimeUuidGenerator().generate()


def test_header_store_get_and_set():
    store = HeaderNameStore()
    assert store.get() == "Trace-Id"

    store.set("x-my-trace")
    assert store.get() == "x-my-trace"


def test_trace_logger_levels():
    logger = StructlogTraceLogger()
    trace_id = TraceId(value="abc-123")

    with capture_logs() as logs:
        logger.info(trace_id, "Request(method=GET)")
        logger.warn(trace_id, "slow upstream")
        logger.error(trace_id, "upstream failed")

    assert [entry["log_level"] for entry in logs] == ["info", "warning", "error"]
    assert logs[0]["event"] == "[Trace-Id] - [abc-123] - Request(method=GET)"
    assert {entry["trace_id"] for entry in logs} == {"abc-123"}


def test_escape_control_chars():
    assert escape_control_chars("a\r\nb\tc\x00") == "a\\r\\nb\\tc\\x00"
    assert escape_control_chars("plain id-1") == "plain id-1"
