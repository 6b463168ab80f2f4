import pytest
from fastapi import Request
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request as StarletteRequest

from tracer.config import Settings
from tracer.main import create_app
from tracer.middleware.tracing import Tracer, current_trace_id


def make_request(
    headers: dict[str, str] | None = None,
    method: str = "GET",
    path: str = "/users",
    state: dict | None = None,
):
    """Build a bare Starlette request without a server."""
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "query_string": b"",
        "http_version": "1.1",
        "client": ("10.0.0.1", 51234),
        "headers": [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in (headers or {}).items()
        ],
    }
    if state is not None:
        scope["state"] = state
    return StarletteRequest(scope)


def raw_header_values(response, name: str) -> list[str]:
    """Values of the raw headers whose name is exactly ``name``, case included."""
    encoded = name.encode("latin-1")
    return [value.decode("latin-1") for key, value in response.raw_headers if key == encoded]


@pytest.fixture
def tracer():
    return Tracer()


@pytest.fixture
def app(tracer):
    _app = create_app(Settings(), tracer=tracer)

    @_app.get("/echo")
    async def echo(request: Request):
        return {
            "header": request.headers.get(tracer.header_store.get()),
            "state": request.state.trace_id,
            "context": current_trace_id(),
        }

    @_app.get("/boom")
    async def boom():
        raise RuntimeError("handler exploded")

    return _app


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
