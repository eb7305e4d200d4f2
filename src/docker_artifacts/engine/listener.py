import logging
from abc import ABC, abstractmethod
from typing import Optional

from .completion import CompletionGate, ErrorCapture

log = logging.getLogger(__name__)


def describe_error(error: BaseException) -> str:
    """Message for an exception, falling back to its type name."""
    return str(error) or error.__class__.__name__


class EventListener(ABC):
    """Receives notifications from a running engine operation.

    Exactly one of on_success, on_error or on_failure ends the operation.
    on_event may fire any number of times before that.
    """

    @abstractmethod
    def on_success(self, message: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def on_error(self, message: str) -> None:
        pass

    @abstractmethod
    def on_failure(self, error: BaseException) -> None:
        pass

    def on_event(self, event: str) -> None:
        log.debug(event)


class CompletionListener(EventListener):
    """Drives a CompletionGate from engine notifications."""

    def __init__(self, gate: CompletionGate, action: str):
        self.gate = gate
        self.action = action

    def _fail(self, message: str) -> None:
        self.gate.signal(
            ErrorCapture.failure(f"Unable to {self.action} Docker image: {message}")
        )

    def on_success(self, message: Optional[str] = None) -> None:
        self.gate.signal()

    def on_error(self, message: str) -> None:
        self._fail(message)

    def on_failure(self, error: BaseException) -> None:
        self._fail(describe_error(error))

    def on_event(self, event: str) -> None:
        event = event.rstrip()
        if event:
            log.debug(f"[{self.action}] {event}")
