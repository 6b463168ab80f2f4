from tracer.middleware.tracing import TraceMiddleware, Tracer, current_trace_id
from tracer.schemas.trace import DEFAULT_TRACE_ID_HEADER, TraceId
from tracer.services.header_store import HeaderNameStore
from tracer.services.id_generator import IdGenerator, TimeUuidGenerator, TraceIdGenerationError
from tracer.services.trace_logger import StructlogTraceLogger, TraceLogger

__all__ = [
    "DEFAULT_TRACE_ID_HEADER",
    "HeaderNameStore",
    "IdGenerator",
    "StructlogTraceLogger",
    "TimeUuidGenerator",
    "TraceId",
    "TraceIdGenerationError",
    "TraceLogger",
    "TraceMiddleware",
    "Tracer",
    "current_trace_id",
]
