"""
Blocking build and push operations.

Each execute() call opens its own engine session, submits the request with a
CompletionListener, blocks on a fresh CompletionGate and releases the output
handle and session before reporting the outcome.
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Set, Union

from ..config import EngineConfig, RegistryAuth
from ..exceptions import EngineError
from ..models import BuildDescriptor
from .client import BuildOptions, EngineSession, OutputHandle, connect, resolve_registry
from .completion import CompletionGate, ErrorCapture
from .listener import CompletionListener

log = logging.getLogger(__name__)

Connector = Callable[[EngineConfig], EngineSession]


class EngineOperation(ABC):
    """Base class for operations that block until the engine finishes."""

    action: str = ""

    def __init__(self, connector: Optional[Connector] = None):
        """
        Args:
            connector: Opens engine sessions (defaults to the Docker SDK client)
        """
        self.connector = connector or connect
        self._lock = threading.Lock()
        self._gates: Set[CompletionGate] = set()

    def engine_config(self, descriptor: BuildDescriptor) -> EngineConfig:
        return EngineConfig.from_descriptor(descriptor)

    @abstractmethod
    def submit(
        self,
        session: EngineSession,
        descriptor: BuildDescriptor,
        listener: CompletionListener,
    ) -> OutputHandle:
        pass

    def execute(self, descriptor: BuildDescriptor) -> None:
        """
        Run the operation and wait for the engine to finish.

        Raises:
            EngineConnectionError: If no session could be opened
            EngineError: If the engine reported a failure
            InterruptedError: If the wait was cancelled
        """
        session = self.connector(self.engine_config(descriptor))
        try:
            capture = self._run(session, descriptor)
        finally:
            session.close()

        if capture.occurred:
            log.error(capture.message)
            raise EngineError(capture.message)

        log.info(f"Docker {self.action} completed: {descriptor.name}")

    def _run(self, session: EngineSession, descriptor: BuildDescriptor) -> ErrorCapture:
        gate = CompletionGate()
        with self._lock:
            self._gates.add(gate)

        try:
            handle = self.submit(session, descriptor, CompletionListener(gate, self.action))
            try:
                return gate.wait()
            finally:
                handle.close()
        finally:
            with self._lock:
                self._gates.discard(gate)

    def cancel(self) -> bool:
        """
        Cancel the waits of all in-flight execute() calls.

        Returns:
            True if at least one pending operation was cancelled
        """
        with self._lock:
            gates = list(self._gates)
        cancelled = [gate.cancel() for gate in gates]
        return any(cancelled)


class BuildOperation(EngineOperation):
    """Build an image from a prepared build context directory."""

    action = "build"

    def __init__(
        self,
        source_dir: Union[str, Path],
        options: BuildOptions = BuildOptions(),
        connector: Optional[Connector] = None,
    ):
        super().__init__(connector)
        self.source_dir = Path(source_dir)
        self.options = options

    def submit(self, session, descriptor, listener):
        return session.build(descriptor.name, self.source_dir, self.options, listener)


class PushOperation(EngineOperation):
    """Push an image to the registry named in its reference."""

    action = "push"

    def engine_config(self, descriptor: BuildDescriptor) -> EngineConfig:
        auth = None
        if descriptor.credentials is not None:
            auth = RegistryAuth(
                registry=resolve_registry(descriptor.name),
                username=descriptor.credentials.username,
                password=descriptor.credentials.password.get_secret_value(),
            )
        return EngineConfig.from_descriptor(descriptor, auth=auth)

    def submit(self, session, descriptor, listener):
        return session.push(descriptor.name, listener)


def build_image(
    descriptor: BuildDescriptor,
    source_dir: Union[str, Path],
    connector: Optional[Connector] = None,
) -> None:
    """Build the descriptor's image from source_dir, blocking until done."""
    BuildOperation(source_dir, connector=connector).execute(descriptor)


def push_image(descriptor: BuildDescriptor, connector: Optional[Connector] = None) -> None:
    """Push the descriptor's image, blocking until done."""
    PushOperation(connector=connector).execute(descriptor)
