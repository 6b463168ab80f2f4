"""
Trace id middleware.

Either reuses the trace id carried by the incoming request or creates one
from a time-based UUID, adds it to the request headers and logs the request
and the response with it:

    [Trace-Id] - [72b079c8-fc92-11e8-aa5a-c0cd91ea221c] - Request(method=GET, uri=/users, ...)
    [Trace-Id] - [72b079c8-fc92-11e8-aa5a-c0cd91ea221c] - Response(status=200, ...)

The id is bound to structlog context vars while the handler runs, so any log
line emitted by the application in between carries it as well.
"""

from collections.abc import Awaitable, Callable

import structlog
from starlette.datastructures import Headers
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tracer.schemas.trace import DEFAULT_TRACE_ID_HEADER, TraceId
from tracer.services.header_store import HeaderNameStore
from tracer.services.id_generator import IdGenerator, default_generator
from tracer.services.trace_logger import StructlogTraceLogger, TraceLogger

Handler = Callable[[Request], Awaitable[Response]]


def current_trace_id() -> str | None:
    """Trace id of the request being handled in the current context, if any."""
    return structlog.contextvars.get_contextvars().get("trace_id")


def describe_request(scope: Scope) -> str:
    uri = scope.get("path", "")
    query = scope.get("query_string", b"").decode("latin-1")
    if query:
        uri = f"{uri}?{query}"
    client = scope.get("client")
    client_addr = f"{client[0]}:{client[1]}" if client else None
    return (
        f"Request(method={scope.get('method')}, uri={uri}, "
        f"http_version={scope.get('http_version')}, client={client_addr})"
    )


def describe_response(status: int | None, headers: Headers) -> str:
    return (
        f"Response(status={status}, content_type={headers.get('content-type')}, "
        f"content_length={headers.get('content-length')})"
    )


def set_raw_header(raw_headers: list[tuple[bytes, bytes]], name: str, value: str) -> None:
    """Replace every ``name`` entry, matched case-insensitively, with one raw pair.

    The name is written exactly as given; starlette's ``MutableHeaders``
    would lowercase it.
    """
    lowered = name.lower().encode("latin-1")
    raw_headers[:] = [(key, val) for key, val in raw_headers if key.lower() != lowered]
    raw_headers.append((name.encode("latin-1"), value.encode("latin-1")))


class Tracer:
    """Resolves, propagates and logs the trace id of each request."""

    def __init__(
        self,
        header_name: str = DEFAULT_TRACE_ID_HEADER,
        logger: TraceLogger | None = None,
        generator: IdGenerator | None = None,
    ) -> None:
        self.header_store = HeaderNameStore(header_name)
        self.logger = logger or StructlogTraceLogger()
        self.generator = generator or default_generator

    def get_trace_id(self, request: Request) -> TraceId | None:
        """Trace id carried by ``request``, without generating one."""
        return self._lookup(request.scope, self.header_store.get())

    def resolve(self, scope: Scope, header_name: str) -> tuple[Scope, TraceId]:
        """Return a copy of ``scope`` for downstream code and its trace id.

        The copy has its own ``headers`` list and ``state`` dict with the
        trace id stored in it. When the request carries no trace id a new one
        is generated and added to the copied headers. ``scope`` itself is
        never modified.
        """
        traced_scope = dict(scope)
        traced_scope["headers"] = list(scope.get("headers", []))

        trace_id = self._lookup(scope, header_name)
        if trace_id is None:
            trace_id = self.generator.generate()
            # ASGI request header names are lowercase
            set_raw_header(traced_scope["headers"], header_name.lower(), trace_id.value)

        traced_scope["state"] = {**scope.get("state", {}), "trace_id": trace_id.value}
        return traced_scope, trace_id

    def wrap(self, handler: Handler) -> Handler:
        """Wrap a ``Request -> Response`` coroutine function."""

        async def traced(request: Request) -> Response:
            header_name = self.header_store.get()
            scope, trace_id = self.resolve(request.scope, header_name)
            traced_request = Request(scope, request.receive)

            self.logger.info(trace_id, describe_request(scope))
            with structlog.contextvars.bound_contextvars(trace_id=trace_id.value):
                response = await handler(traced_request)

            set_raw_header(response.raw_headers, header_name, trace_id.value)
            self.logger.info(trace_id, describe_response(response.status_code, response.headers))
            return response

        return traced

    def middleware(self, app: ASGIApp) -> "TraceMiddleware":
        return TraceMiddleware(app, tracer=self)

    @staticmethod
    def _lookup(scope: Scope, header_name: str) -> TraceId | None:
        lowered = header_name.lower().encode("latin-1")
        for key, value in scope.get("headers", []):
            if key.lower() == lowered:
                return TraceId(value=value.decode("latin-1"))
        return None


class TraceMiddleware:
    """ASGI middleware applying :class:`Tracer` to every HTTP request of an app."""

    def __init__(
        self,
        app: ASGIApp,
        tracer: Tracer | None = None,
        header_name: str = DEFAULT_TRACE_ID_HEADER,
    ) -> None:
        self.app = app
        self.tracer = tracer or Tracer(header_name=header_name)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        header_name = self.tracer.header_store.get()
        scope, trace_id = self.tracer.resolve(scope, header_name)
        self.tracer.logger.info(trace_id, describe_request(scope))

        response_start: Message = {}

        async def send_with_trace_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", []))
                set_raw_header(message["headers"], header_name, trace_id.value)
                response_start.update(message)
            await send(message)

        with structlog.contextvars.bound_contextvars(trace_id=trace_id.value):
            await self.app(scope, receive, send_with_trace_id)

        # the app returned without starting a response, e.g. the client went away
        if not response_start:
            return

        self.tracer.logger.info(
            trace_id,
            describe_response(
                response_start["status"],
                Headers(raw=response_start["headers"]),
            ),
        )
