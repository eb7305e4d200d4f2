"""
Docker engine connection configuration.

Connection settings are resolved per operation from the build descriptor,
falling back to the standard Docker environment variables.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .constants import DEFAULT_DOCKER_HOST, DEFAULT_ENGINE_TIMEOUT
from .models import BuildDescriptor


@dataclass(frozen=True)
class RegistryAuth:
    """Credentials for the registry an image is pushed to."""

    registry: str
    username: str
    password: str = field(repr=False)

    def to_auth_config(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "password": self.password,
            "serveraddress": self.registry,
        }


@dataclass(frozen=True)
class EngineConfig:
    """Settings for one session with the Docker engine."""

    base_url: str = DEFAULT_DOCKER_HOST
    cert_path: Optional[str] = None
    tls_verify: bool = True
    timeout: int = DEFAULT_ENGINE_TIMEOUT
    auth: Optional[RegistryAuth] = None

    @classmethod
    def from_descriptor(
        cls, descriptor: BuildDescriptor, auth: Optional[RegistryAuth] = None
    ) -> "EngineConfig":
        """
        Create engine config from a descriptor and the environment.

        Environment variables:
            DOCKER_HOST: Engine endpoint used when the descriptor has no host
            DOCKER_CERT_PATH: TLS cert directory used when the descriptor has none
            DOCKER_TLS_VERIFY: Verify the engine certificate (default true)

        Returns:
            EngineConfig instance
        """
        base_url = descriptor.host or os.getenv("DOCKER_HOST") or DEFAULT_DOCKER_HOST
        cert_path = descriptor.cert_path or os.getenv("DOCKER_CERT_PATH") or None
        tls_verify = os.getenv("DOCKER_TLS_VERIFY", "true").lower() not in (
            "false",
            "0",
            "no",
        )

        return cls(
            base_url=base_url,
            cert_path=cert_path,
            tls_verify=tls_verify,
            auth=auth,
        )
