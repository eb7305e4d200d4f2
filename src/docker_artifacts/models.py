"""
Build descriptor models.

A BuildDescriptor describes one image: what goes into its Dockerfile and
where it is built and pushed. Descriptors are frozen once constructed.
"""

from pathlib import Path
from typing import FrozenSet, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .constants import DEFAULT_DEBUG_PORT


class FrozenModel(BaseModel):
    """Base class for immutable descriptor models."""

    model_config = ConfigDict(
        frozen=True,
        validate_by_name=True,
        validate_by_alias=True,
        extra="forbid",
    )


class CopyEntry(FrozenModel):
    """A file embedded in the image next to the primary artifact."""

    source: str
    target: str
    is_config_file: bool = Field(default=False, alias="isConfigFile")

    @property
    def source_name(self) -> str:
        """File name of the source, as staged flat in the build context."""
        return Path(self.source).name


class DebugSettings(FrozenModel):
    enabled: bool = False
    port: int = Field(default=DEFAULT_DEBUG_PORT, ge=1, le=65535)


class RegistryCredentials(FrozenModel):
    username: str
    password: SecretStr


class BuildDescriptor(FrozenModel):
    """Everything needed to generate, build and push one Docker image."""

    name: str
    base_image: str = Field(alias="baseImage")
    artifact_name: str = Field(alias="artifactName")
    files: Tuple[CopyEntry, ...] = ()
    ports: FrozenSet[int] = frozenset()
    is_service: bool = Field(default=False, alias="isService")
    debug: Optional[DebugSettings] = None
    host: Optional[str] = None
    cert_path: Optional[str] = Field(default=None, alias="certPath")
    credentials: Optional[RegistryCredentials] = None

    @field_validator("name", "base_image", "artifact_name")
    @classmethod
    def validate_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("name")
    @classmethod
    def validate_image_reference(cls, value: str) -> str:
        if "://" in value:
            raise ValueError("must be an image reference, not a URL")
        return value

    @field_validator("ports")
    @classmethod
    def validate_ports(cls, value: FrozenSet[int]) -> FrozenSet[int]:
        invalid = sorted(port for port in value if not 0 < port <= 65535)
        if invalid:
            raise ValueError(f"invalid port numbers: {invalid}")
        return value

    @property
    def debug_enabled(self) -> bool:
        return self.debug is not None and self.debug.enabled

    @property
    def config_files(self) -> Tuple[CopyEntry, ...]:
        """Entries passed to the runtime with --config, in files order."""
        return tuple(entry for entry in self.files if entry.is_config_file)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "BuildDescriptor":
        """Load a descriptor from a JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
