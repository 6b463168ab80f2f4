from pydantic import BaseModel, ConfigDict

DEFAULT_TRACE_ID_HEADER = "Trace-Id"


class TraceId(BaseModel):
    """Opaque identifier shared by a request, its response and their log lines."""

    model_config = ConfigDict(frozen=True)

    value: str

    def __str__(self) -> str:
        return f"[Trace-Id] - [{self.value}]"
