"""
Single-resolution completion primitives for engine operations.

The engine reports the end of a build or push through one of several
callbacks. Whichever fires first resolves the CompletionGate together with
its ErrorCapture; every later signal is ignored.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorCapture:
    """Outcome of one engine operation."""

    occurred: bool = False
    message: Optional[str] = None

    @classmethod
    def success(cls) -> "ErrorCapture":
        return cls()

    @classmethod
    def failure(cls, message: str) -> "ErrorCapture":
        return cls(occurred=True, message=message)


class GateState(str, Enum):
    PENDING = "pending"
    SIGNALED = "signaled"
    CANCELLED = "cancelled"


class CompletionGate:
    """
    Releases a blocked waiter exactly once.

    The outcome is stored under the same lock that moves the gate out of
    PENDING, so wait() never observes a capture written by a losing signal.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._released = threading.Event()
        self._state = GateState.PENDING
        self._capture: Optional[ErrorCapture] = None

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def is_pending(self) -> bool:
        return self._state is GateState.PENDING

    def signal(self, capture: Optional[ErrorCapture] = None) -> bool:
        """
        Resolve the gate with an outcome.

        Args:
            capture: Failure details, or None for success

        Returns:
            True if this call resolved the gate, False if it was already resolved
        """
        return self._resolve(GateState.SIGNALED, capture or ErrorCapture.success())

    def cancel(self) -> bool:
        """Release the waiter with InterruptedError if still pending."""
        return self._resolve(GateState.CANCELLED, None)

    def _resolve(self, state: GateState, capture: Optional[ErrorCapture]) -> bool:
        with self._lock:
            if self._state is not GateState.PENDING:
                log.debug(f"Ignoring {state.value} signal, gate already {self._state.value}")
                return False
            self._capture = capture
            self._state = state
        self._released.set()
        return True

    def wait(self) -> ErrorCapture:
        """
        Block until the gate is resolved.

        Returns:
            The ErrorCapture recorded by the first signal

        Raises:
            InterruptedError: If the gate was cancelled
        """
        self._released.wait()
        if self._state is GateState.CANCELLED:
            raise InterruptedError("Wait for Docker engine operation was cancelled")
        return self._capture
