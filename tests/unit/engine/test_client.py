"""Tests for Docker engine sessions and stream handles."""

import threading
from unittest.mock import MagicMock, patch

import pytest
import requests
from docker.errors import APIError, DockerException, TLSParameterError

from docker_artifacts.config import EngineConfig, RegistryAuth
from docker_artifacts.engine.client import (
    BuildOptions,
    DockerEngineSession,
    StreamOutputHandle,
    connect,
    resolve_registry,
    tls_config,
)
from docker_artifacts.engine.listener import EventListener
from docker_artifacts.exceptions import EngineConnectionError, InvalidImageReferenceError


class RecordingListener(EventListener):
    """Listener that records every notification."""

    def __init__(self):
        self.events = []
        self.terminal = []
        self.done = threading.Event()

    def on_success(self, message=None):
        self.terminal.append(("success", message))
        self.done.set()

    def on_error(self, message):
        self.terminal.append(("error", message))
        self.done.set()

    def on_failure(self, error):
        self.terminal.append(("failure", error))
        self.done.set()

    def on_event(self, event):
        self.events.append(event)


def _pump(chunks_or_factory):
    listener = RecordingListener()
    factory = chunks_or_factory if callable(chunks_or_factory) else lambda: iter(chunks_or_factory)
    handle = StreamOutputHandle(factory, listener).start()
    assert listener.done.wait(timeout=5)
    handle.close()
    return listener


class TestStreamOutputHandle:
    """Test StreamOutputHandle dispatching."""

    def test_success_after_progress(self):
        listener = _pump(
            [
                {"stream": "Step 1/2 : FROM ubuntu\n"},
                {"status": "Pushing", "id": "abc123", "progress": "[==>   ]"},
                {"aux": {"ID": "sha256:123"}},
            ]
        )

        assert listener.events == [
            "Step 1/2 : FROM ubuntu\n",
            "abc123: Pushing [==>   ]",
            '{"aux": {"ID": "sha256:123"}}',
        ]
        assert listener.terminal == [("success", None)]

    def test_error_chunk_stops_stream(self):
        listener = _pump(
            [
                {"stream": "Step 1/2\n"},
                {"error": "manifest unknown", "errorDetail": {"message": "manifest unknown"}},
                {"stream": "never delivered\n"},
            ]
        )

        assert listener.events == ["Step 1/2\n"]
        assert listener.terminal == [("error", "manifest unknown")]

    def test_error_detail_only(self):
        listener = _pump([{"errorDetail": {"message": "denied: access forbidden"}}])
        assert listener.terminal == [("error", "denied: access forbidden")]

    def test_exception_while_reading(self):
        def stream():
            yield {"stream": "Step 1/2\n"}
            raise requests.exceptions.ChunkedEncodingError("connection broken")

        listener = _pump(stream)

        kind, error = listener.terminal[0]
        assert len(listener.terminal) == 1
        assert kind == "failure"
        assert isinstance(error, requests.exceptions.ChunkedEncodingError)

    def test_exception_opening_stream(self):
        def stream():
            raise APIError("Cannot locate specified Dockerfile")

        listener = _pump(stream)
        assert listener.terminal[0][0] == "failure"

    def test_no_notifications_after_close(self):
        finished = threading.Event()
        listener = RecordingListener()

        def stream():
            try:
                yield {"stream": "first\n"}
                yield {"stream": "second\n"}
            finally:
                finished.set()

        handle = StreamOutputHandle(stream, listener)

        def close_on_first_event(event):
            listener.events.append(event)
            handle.close()

        listener.on_event = close_on_first_event
        handle.start()

        assert finished.wait(timeout=5)
        assert handle.closed
        assert listener.events == ["first\n"]
        assert listener.terminal == []

    def test_close_is_idempotent(self):
        handle = StreamOutputHandle(lambda: iter([]), RecordingListener()).start()
        handle.close()
        handle.close()
        assert handle.closed


class TestResolveRegistry:
    """Test registry resolution from image references."""

    @pytest.mark.parametrize(
        "image,registry",
        [
            ("registry.example.com/team/app:1.0", "registry.example.com"),
            ("localhost:5000/app", "localhost:5000"),
            ("myorg/app:1.0", "https://index.docker.io/v1/"),
            ("app:1.0", "https://index.docker.io/v1/"),
        ],
    )
    def test_registry_from_reference(self, image, registry):
        assert resolve_registry(image) == registry

    def test_invalid_reference(self):
        with pytest.raises(InvalidImageReferenceError) as exc_info:
            resolve_registry("https://registry.example.com/app")

        assert not isinstance(exc_info.value, ConnectionError)


class TestTlsConfig:
    """Test TLS configuration from cert directories."""

    def test_no_cert_path_disables_tls(self):
        assert tls_config(EngineConfig()) is False

    def test_cert_directory(self, tmp_path):
        for name in ("ca.pem", "cert.pem", "key.pem"):
            (tmp_path / name).write_text("pem")

        tls = tls_config(EngineConfig(cert_path=str(tmp_path)))

        assert tls.cert == (str(tmp_path / "cert.pem"), str(tmp_path / "key.pem"))
        assert tls.ca_cert == str(tmp_path / "ca.pem")

    def test_missing_cert_files(self, tmp_path):
        with pytest.raises(TLSParameterError):
            tls_config(EngineConfig(cert_path=str(tmp_path)))


class TestConnect:
    """Test connect() error mapping."""

    @patch("docker_artifacts.engine.client.APIClient")
    def test_connects_and_pings(self, mock_client_cls):
        api = mock_client_cls.return_value

        session = connect(EngineConfig(base_url="tcp://127.0.0.1:2375"))

        assert isinstance(session, DockerEngineSession)
        assert session.api is api
        api.ping.assert_called_once()
        api.login.assert_not_called()
        assert mock_client_cls.call_args.kwargs["base_url"] == "tcp://127.0.0.1:2375"
        assert mock_client_cls.call_args.kwargs["tls"] is False

    @patch("docker_artifacts.engine.client.APIClient")
    def test_logs_in_with_auth(self, mock_client_cls):
        api = mock_client_cls.return_value
        auth = RegistryAuth(registry="registry.example.com", username="u", password="p")

        session = connect(EngineConfig(auth=auth))

        api.login.assert_called_once_with(
            username="u", password="p", registry="registry.example.com"
        )
        assert session.auth is auth

    @patch("docker_artifacts.engine.client.APIClient")
    def test_client_construction_failure(self, mock_client_cls):
        mock_client_cls.side_effect = DockerException("Error while fetching server API version")

        with pytest.raises(EngineConnectionError, match="tcp://nowhere:2375"):
            connect(EngineConfig(base_url="tcp://nowhere:2375"))

    @patch("docker_artifacts.engine.client.APIClient")
    def test_unreachable_engine_closes_client(self, mock_client_cls):
        api = mock_client_cls.return_value
        api.ping.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(EngineConnectionError) as exc_info:
            connect(EngineConfig())

        assert isinstance(exc_info.value, ConnectionError)
        api.close.assert_called_once()

    @patch("docker_artifacts.engine.client.APIClient")
    def test_rejected_credentials(self, mock_client_cls):
        api = mock_client_cls.return_value
        api.login.side_effect = APIError("unauthorized: incorrect username or password")
        auth = RegistryAuth(registry="registry.example.com", username="u", password="bad")

        with pytest.raises(EngineConnectionError, match="unauthorized"):
            connect(EngineConfig(auth=auth))

        api.close.assert_called_once()

    def test_bad_cert_path(self, tmp_path):
        with pytest.raises(EngineConnectionError):
            connect(EngineConfig(cert_path=str(tmp_path / "missing")))


class TestDockerEngineSession:
    """Test DockerEngineSession requests."""

    def test_build_request(self, tmp_path):
        api = MagicMock()
        api.build.return_value = iter([{"stream": "Successfully built 123\n"}])
        listener = RecordingListener()

        handle = DockerEngineSession(api).build(
            "app:1.0", tmp_path, BuildOptions(), listener
        )
        assert listener.done.wait(timeout=5)
        handle.close()

        api.build.assert_called_once_with(
            path=str(tmp_path),
            tag="app:1.0",
            nocache=True,
            rm=True,
            forcerm=True,
            decode=True,
        )
        assert listener.terminal == [("success", None)]

    def test_push_request_with_auth(self):
        api = MagicMock()
        api.push.return_value = iter([{"status": "latest: digest: sha256:abc"}])
        auth = RegistryAuth(registry="registry.example.com", username="u", password="p")
        listener = RecordingListener()

        handle = DockerEngineSession(api, auth=auth).push(
            "registry.example.com/team/app:1.0", listener
        )
        assert listener.done.wait(timeout=5)
        handle.close()

        api.push.assert_called_once_with(
            "registry.example.com/team/app",
            tag="1.0",
            stream=True,
            decode=True,
            auth_config=auth.to_auth_config(),
        )

    def test_untagged_push_defaults_to_latest(self):
        api = MagicMock()
        api.push.return_value = iter([])
        listener = RecordingListener()

        DockerEngineSession(api).push("app", listener)
        assert listener.done.wait(timeout=5)

        api.push.assert_called_once_with(
            "app", tag="latest", stream=True, decode=True, auth_config=None
        )

    def test_close_closes_api(self):
        api = MagicMock()
        DockerEngineSession(api).close()
        api.close.assert_called_once()
