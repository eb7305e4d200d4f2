"""
Docker engine sessions.

Wraps the Docker SDK low-level API behind a session/handle interface. Build
and push output is read from the engine's decoded JSON stream on a reader
thread and dispatched to an EventListener.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Union

from docker import APIClient
from docker.auth import INDEX_NAME, INDEX_URL, resolve_repository_name
from docker.errors import DockerException
from docker.tls import TLSConfig
from docker.utils import parse_repository_tag
from requests.exceptions import RequestException

from ..config import EngineConfig, RegistryAuth
from ..constants import TLS_CA_CERT, TLS_CLIENT_CERT, TLS_CLIENT_KEY
from ..exceptions import EngineConnectionError, InvalidImageReferenceError
from .listener import EventListener

log = logging.getLogger(__name__)

# Seconds to wait for a reader thread after its handle is closed
HANDLE_JOIN_TIMEOUT = 1.0


@dataclass(frozen=True)
class BuildOptions:
    """Options passed to the engine for image builds."""

    no_cache: bool = True
    always_remove_intermediate: bool = True


class OutputHandle(ABC):
    """Handle on a running engine operation."""

    @abstractmethod
    def close(self) -> None:
        pass


class EngineSession(ABC):
    """A connection to the Docker engine."""

    @abstractmethod
    def build(
        self,
        repository_name: str,
        source_dir: Union[str, Path],
        options: BuildOptions,
        listener: EventListener,
    ) -> OutputHandle:
        pass

    @abstractmethod
    def push(self, image_name: str, listener: EventListener) -> OutputHandle:
        pass

    @abstractmethod
    def close(self) -> None:
        pass


def _chunk_error(chunk: Dict[str, Any]) -> Optional[str]:
    if "error" in chunk:
        return str(chunk["error"]).strip()
    detail = chunk.get("errorDetail")
    if detail:
        return str(detail.get("message", detail)).strip()
    return None


def _chunk_event(chunk: Dict[str, Any]) -> Optional[str]:
    if "stream" in chunk:
        return chunk["stream"]
    if "status" in chunk:
        status = chunk["status"]
        if chunk.get("id"):
            status = f"{chunk['id']}: {status}"
        if chunk.get("progress"):
            status = f"{status} {chunk['progress']}"
        return status
    if chunk:
        return json.dumps(chunk)
    return None


class StreamOutputHandle(OutputHandle):
    """
    Pumps an engine output stream into an EventListener.

    Delivers exactly one terminal notification: on_error for the first error
    chunk, on_failure if reading the stream raises, or on_success at the end
    of the stream. Nothing is delivered after close().
    """

    def __init__(
        self,
        stream_factory: Callable[[], Iterable[Dict[str, Any]]],
        listener: EventListener,
        name: str = "docker-stream",
    ):
        self._stream_factory = stream_factory
        self._listener = listener
        self._closed = threading.Event()
        self._thread = threading.Thread(target=self._pump, name=name, daemon=True)

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def start(self) -> "StreamOutputHandle":
        self._thread.start()
        return self

    def _pump(self) -> None:
        try:
            for chunk in self._stream_factory():
                if self.closed:
                    return
                error = _chunk_error(chunk)
                if error is not None:
                    self._listener.on_error(error)
                    return
                event = _chunk_event(chunk)
                if event:
                    self._listener.on_event(event)
        except Exception as e:
            if self.closed:
                log.debug(f"Engine stream ended after close: {e}")
            else:
                self._listener.on_failure(e)
            return

        if not self.closed:
            self._listener.on_success()

    def close(self) -> None:
        if self.closed:
            return
        self._closed.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=HANDLE_JOIN_TIMEOUT)


class DockerEngineSession(EngineSession):
    """Engine session backed by docker.APIClient."""

    def __init__(self, api: APIClient, auth: Optional[RegistryAuth] = None):
        self.api = api
        self.auth = auth

    def build(
        self,
        repository_name: str,
        source_dir: Union[str, Path],
        options: BuildOptions,
        listener: EventListener,
    ) -> OutputHandle:
        log.info(f"Building Docker image: {repository_name}")
        log.info(f"   Build dir: {source_dir}")

        def stream():
            return self.api.build(
                path=str(source_dir),
                tag=repository_name,
                nocache=options.no_cache,
                rm=True,
                forcerm=options.always_remove_intermediate,
                decode=True,
            )

        return StreamOutputHandle(
            stream, listener, name=f"docker-build-{repository_name}"
        ).start()

    def push(self, image_name: str, listener: EventListener) -> OutputHandle:
        repository, tag = parse_repository_tag(image_name)
        # An untagged push would upload every local tag of the repository
        tag = tag or "latest"
        auth_config = self.auth.to_auth_config() if self.auth else None

        log.info(f"Pushing to registry: {image_name}")

        def stream():
            return self.api.push(
                repository,
                tag=tag,
                stream=True,
                decode=True,
                auth_config=auth_config,
            )

        return StreamOutputHandle(
            stream, listener, name=f"docker-push-{image_name}"
        ).start()

    def close(self) -> None:
        self.api.close()


def resolve_registry(image_name: str) -> str:
    """
    Get the registry that credentials for an image apply to.

    Args:
        image_name: Image reference, e.g. registry.example.com/team/app:1.0

    Returns:
        Registry address; Docker Hub images resolve to the index URL

    Raises:
        InvalidImageReferenceError: If the image reference is not a valid repository
    """
    repository, _ = parse_repository_tag(image_name)
    try:
        registry, _ = resolve_repository_name(repository)
    except DockerException as e:
        raise InvalidImageReferenceError(
            f"Invalid image reference {image_name}: {e}"
        ) from e

    if registry == INDEX_NAME:
        return INDEX_URL
    return registry


def tls_config(config: EngineConfig) -> Union[TLSConfig, bool]:
    """Build TLS settings from the config's cert directory."""
    if not config.cert_path:
        return False

    cert_dir = Path(config.cert_path)
    return TLSConfig(
        client_cert=(str(cert_dir / TLS_CLIENT_CERT), str(cert_dir / TLS_CLIENT_KEY)),
        ca_cert=str(cert_dir / TLS_CA_CERT),
        verify=config.tls_verify,
    )


def connect(config: EngineConfig) -> DockerEngineSession:
    """
    Open a session with the Docker engine.

    Authenticates against the registry first when the config carries
    credentials.

    Raises:
        EngineConnectionError: If the engine is unreachable, the TLS material is
            invalid or the registry rejects the credentials
    """
    log.debug(f"Connecting to Docker engine at {config.base_url}")

    try:
        api = APIClient(
            base_url=config.base_url, tls=tls_config(config), timeout=config.timeout
        )
    except DockerException as e:
        raise EngineConnectionError(
            f"Unable to connect to Docker engine at {config.base_url}: {e}"
        ) from e

    try:
        api.ping()
        if config.auth:
            api.login(
                username=config.auth.username,
                password=config.auth.password,
                registry=config.auth.registry,
            )
    except (DockerException, RequestException) as e:
        api.close()
        raise EngineConnectionError(
            f"Unable to connect to Docker engine at {config.base_url}: {e}"
        ) from e

    return DockerEngineSession(api, auth=config.auth)
