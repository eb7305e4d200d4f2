"""
Docker engine operations.

Blocking build and push on top of the engine's streamed notifications.
"""

from .client import (
    BuildOptions,
    DockerEngineSession,
    EngineSession,
    OutputHandle,
    StreamOutputHandle,
    connect,
    resolve_registry,
)
from .completion import CompletionGate, ErrorCapture, GateState
from .listener import CompletionListener, EventListener
from .operations import (
    BuildOperation,
    EngineOperation,
    PushOperation,
    build_image,
    push_image,
)

__all__ = [
    # Synchronization
    "CompletionGate",
    "ErrorCapture",
    "GateState",
    "EventListener",
    "CompletionListener",
    # Engine capability
    "EngineSession",
    "OutputHandle",
    "StreamOutputHandle",
    "DockerEngineSession",
    "BuildOptions",
    "connect",
    "resolve_registry",
    # Operations
    "EngineOperation",
    "BuildOperation",
    "PushOperation",
    "build_image",
    "push_image",
]
