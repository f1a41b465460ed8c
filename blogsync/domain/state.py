from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

OperationStatus = Literal["idle", "pending", "succeeded", "failed"]

Listener = Callable[[], None]


@dataclass(frozen=True)
class OperationState:
    """Status of the last call issued for one view or record."""

    status: OperationStatus = "idle"
    error: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    @property
    def is_failed(self) -> bool:
        return self.status == "failed"


IDLE = OperationState()
PENDING = OperationState("pending")
SUCCEEDED = OperationState("succeeded")


def failed(message: str) -> OperationState:
    return OperationState("failed", message)


class Observable:
    """Minimal change-notification mixin for state-owning components."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()


class RequestSequence:
    """
    Per-view request counter.

    Each call takes a ticket; only the holder of the newest ticket may
    write its response into the view.
    """

    def __init__(self) -> None:
        self._latest = 0

    def next(self) -> int:
        self._latest += 1
        return self._latest

    def is_latest(self, ticket: int) -> bool:
        return ticket == self._latest
