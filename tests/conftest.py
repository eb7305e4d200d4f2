"""
Test configuration and fixtures for docker-artifacts tests.

Provides shared fixtures for:
- Build descriptors
- Fake engine sessions that replay listener notifications
- Environment variable management
"""

import threading
from typing import Any, Callable, Dict, List, Optional

import pytest

from docker_artifacts.engine.client import EngineSession, OutputHandle
from docker_artifacts.models import BuildDescriptor

Script = Callable[[Any], None]


class FakeHandle(OutputHandle):
    """Output handle that counts close() calls."""

    def __init__(self):
        self.close_count = 0

    def close(self) -> None:
        self.close_count += 1


class FakeSession(EngineSession):
    """
    Engine session that replays a script against the submitted listener.

    The script runs on a background thread when threaded=True, otherwise
    inline before the handle is returned.
    """

    def __init__(self, script: Optional[Script] = None, threaded: bool = False):
        self.script = script
        self.threaded = threaded
        self.handle = FakeHandle()
        self.close_count = 0
        self.calls: List[Dict[str, Any]] = []
        self.thread: Optional[threading.Thread] = None

    def _run(self, listener) -> OutputHandle:
        if self.script is not None:
            if self.threaded:
                self.thread = threading.Thread(target=self.script, args=(listener,))
                self.thread.start()
            else:
                self.script(listener)
        return self.handle

    def build(self, repository_name, source_dir, options, listener):
        self.calls.append(
            {
                "op": "build",
                "name": repository_name,
                "source_dir": source_dir,
                "options": options,
            }
        )
        return self._run(listener)

    def push(self, image_name, listener):
        self.calls.append({"op": "push", "name": image_name})
        return self._run(listener)

    def close(self) -> None:
        self.close_count += 1


@pytest.fixture
def descriptor_data() -> Dict[str, Any]:
    """Provide a service descriptor as loaded from JSON."""
    return {
        "name": "app:1.0",
        "baseImage": "ubuntu:20.04",
        "artifactName": "app.bin",
        "files": [
            {
                "source": "/src/conf.toml",
                "target": "/home/app/conf.toml",
                "isConfigFile": True,
            }
        ],
        "isService": True,
        "ports": [8080],
        "debug": {"enabled": False},
    }


@pytest.fixture
def descriptor(descriptor_data) -> BuildDescriptor:
    return BuildDescriptor.model_validate(descriptor_data)


@pytest.fixture
def make_descriptor() -> Callable[..., BuildDescriptor]:
    """Build descriptors with minimal required fields and overrides."""

    def _make(**overrides) -> BuildDescriptor:
        data = {
            "name": "registry.example.com/team/app:1.0",
            "base_image": "ubuntu:20.04",
            "artifact_name": "app.bin",
        }
        data.update(overrides)
        return BuildDescriptor(**data)

    return _make


@pytest.fixture(autouse=True)
def clean_docker_env(monkeypatch):
    """Keep the host's Docker environment out of the tests."""
    for var in ("DOCKER_HOST", "DOCKER_CERT_PATH", "DOCKER_TLS_VERIFY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_session():
    """Provide the FakeSession class for building scripted engine sessions."""
    return FakeSession
