from tracer.schemas.trace import DEFAULT_TRACE_ID_HEADER


class HeaderNameStore:
    """Holds the name of the header carrying the trace id.

    Reads and writes rebind a single ``str`` attribute, so a concurrent
    ``get`` always sees one whole name.
    """

    def __init__(self, name: str = DEFAULT_TRACE_ID_HEADER) -> None:
        self._name = name

    def get(self) -> str:
        return self._name

    def set(self, name: str) -> None:
        self._name = name
