"""
Dockerfile generation.

Renders the Dockerfile for a BuildDescriptor. The instruction order is fixed:
base image, label, primary artifact, embedded files, optional EXPOSE, then
the CMD line carrying --config, --debug and the artifact name.
"""

from dataclasses import dataclass

from .constants import (
    DEFAULT_ARTIFACT_DIR,
    DEFAULT_MAINTAINER,
    DEFAULT_RUN_COMMAND,
    DOCKERFILE_HEADER,
)
from .models import BuildDescriptor


@dataclass(frozen=True)
class DockerfileTemplate:
    """Fixed values written into every generated Dockerfile."""

    maintainer: str = DEFAULT_MAINTAINER
    artifact_dir: str = DEFAULT_ARTIFACT_DIR
    run_command: str = DEFAULT_RUN_COMMAND


class DockerfileGenerator:
    """Generate Dockerfile content from a build descriptor."""

    def __init__(self, template: DockerfileTemplate = DockerfileTemplate()):
        self.template = template

    def generate(self, descriptor: BuildDescriptor) -> str:
        """
        Generate Dockerfile content.

        Args:
            descriptor: Build descriptor to render

        Returns:
            Dockerfile content as a string
        """
        parts = [
            f"{DOCKERFILE_HEADER}\n",
            "\n",
            f"FROM {descriptor.base_image}\n",
            f'LABEL maintainer="{self.template.maintainer}"\n',
            "\n",
            f"COPY {descriptor.artifact_name} {self.template.artifact_dir} \n\n",
        ]

        # Embedded files are staged flat next to the Dockerfile
        for entry in descriptor.files:
            parts.append(f"COPY {entry.source_name} {entry.target}\n")

        run_prefix = f"CMD {self.template.run_command} "
        if descriptor.is_service and descriptor.ports:
            exposed = "".join(f" {port}" for port in sorted(descriptor.ports))
            parts.append(f"EXPOSE {exposed}\n\n{run_prefix}")
        else:
            parts.append(run_prefix)

        for entry in descriptor.config_files:
            parts.append(f" --config {entry.target}")

        if descriptor.debug_enabled:
            parts.append(f" --debug {descriptor.debug.port}")

        parts.append(f" {descriptor.artifact_name}\n")
        return "".join(parts)


def generate_dockerfile(descriptor: BuildDescriptor) -> str:
    """Render a descriptor with the default template."""
    return DockerfileGenerator().generate(descriptor)
