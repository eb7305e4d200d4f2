"""Custom exceptions for Docker artifact generation."""


class DockerArtifactError(Exception):
    """Base exception for Docker artifact errors."""

    pass


class EngineError(DockerArtifactError):
    """Raised when the Docker engine reports a build or push failure."""

    pass


class EngineConnectionError(DockerArtifactError, ConnectionError):
    """Raised when a session with the Docker engine cannot be established."""

    pass


class ArtifactError(DockerArtifactError):
    """Raised when build context files cannot be staged."""

    pass


class InvalidImageReferenceError(DockerArtifactError, ValueError):
    """Raised when an image name is not a valid repository reference."""

    pass
