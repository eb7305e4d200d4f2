# Load .env vars from file before everything else
from dotenv import load_dotenv

load_dotenv()

from .logger import setup_logging  # noqa: E402

setup_logging()

# TYPE_CHECKING imports provide IDE support while __getattr__ keeps CLI startup fast
from typing import TYPE_CHECKING  # noqa: E402

if TYPE_CHECKING:
    from .artifacts import ArtifactResult, DockerArtifactHandler
    from .dockerfile import DockerfileGenerator, DockerfileTemplate
    from .engine import BuildOperation, PushOperation
    from .exceptions import (
        ArtifactError,
        DockerArtifactError,
        EngineConnectionError,
        EngineError,
    )
    from .models import BuildDescriptor, CopyEntry, DebugSettings, RegistryCredentials

_EXPORTS = {
    "ArtifactResult": "artifacts",
    "DockerArtifactHandler": "artifacts",
    "DockerfileGenerator": "dockerfile",
    "DockerfileTemplate": "dockerfile",
    "BuildOperation": "engine",
    "PushOperation": "engine",
    "ArtifactError": "exceptions",
    "DockerArtifactError": "exceptions",
    "EngineConnectionError": "exceptions",
    "EngineError": "exceptions",
    "BuildDescriptor": "models",
    "CopyEntry": "models",
    "DebugSettings": "models",
    "RegistryCredentials": "models",
}


def __getattr__(name):
    """Lazily import core modules only when accessed."""
    if name in _EXPORTS:
        import importlib

        module = importlib.import_module(f".{_EXPORTS[name]}", __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_EXPORTS)
