from typing import Protocol, runtime_checkable


@runtime_checkable
class DiagnosticsSink(Protocol):
    """Receives the trace lines emitted by the validation passes.

    ``logging.Logger`` satisfies this protocol.
    """

    def info(self, msg: str, *args: object) -> None: ...

    def error(self, msg: str, *args: object) -> None: ...
