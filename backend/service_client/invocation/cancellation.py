"""
Cancellation handle forwarded verbatim from proxy callers to the invoker
"""
import threading
from typing import ClassVar, Optional


class CancellationToken:
    """
    Opaque cancellation handle.

    A contract method whose last parameter is annotated with this type
    receives the caller's token and passes it to ``Invoker.invoke``
    untouched. Observing and acting on the token is the invoker's job.
    """

    NONE: ClassVar["CancellationToken"]

    __slots__ = ("_event",)

    def __init__(self, event: Optional[threading.Event] = None):
        self._event = event

    @classmethod
    def create(cls) -> "CancellationToken":
        """New token that can be cancelled"""
        return cls(threading.Event())

    @property
    def can_be_cancelled(self) -> bool:
        return self._event is not None

    @property
    def is_cancellation_requested(self) -> bool:
        return self._event is not None and self._event.is_set()

    def cancel(self) -> None:
        if self._event is None:
            raise RuntimeError("CancellationToken.NONE cannot be cancelled")
        self._event.set()

    def __repr__(self) -> str:
        if self._event is None:
            return "CancellationToken.NONE"
        return f"CancellationToken(cancelled={self._event.is_set()})"


CancellationToken.NONE = CancellationToken()
