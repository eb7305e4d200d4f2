"""
Docker artifact orchestrator.

Stages the build context for a descriptor (primary artifact, embedded files
and generated Dockerfile) and optionally builds and pushes the image.
"""

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from .constants import DOCKERFILE_NAME
from .dockerfile import DockerfileGenerator
from .engine.operations import BuildOperation, Connector, PushOperation
from .exceptions import ArtifactError
from .models import BuildDescriptor

log = logging.getLogger(__name__)


@dataclass
class ArtifactResult:
    """Result of creating Docker artifacts."""

    output_dir: Path
    dockerfile: Path
    staged_files: List[Path] = field(default_factory=list)
    built: bool = False
    pushed: bool = False


class DockerArtifactHandler:
    """
    Create Docker artifacts for a build descriptor.

    This class coordinates:
    1. Staging the primary artifact and embedded files into the build context
    2. Dockerfile generation
    3. Docker image building
    4. Registry pushing
    """

    def __init__(
        self,
        descriptor: BuildDescriptor,
        dockerfile_generator: Optional[DockerfileGenerator] = None,
        connector: Optional[Connector] = None,
    ):
        self.descriptor = descriptor
        self.dockerfile_generator = dockerfile_generator or DockerfileGenerator()
        self.connector = connector

    def write_dockerfile(self, output_dir: Union[str, Path]) -> Path:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        dockerfile_path = output_dir / DOCKERFILE_NAME
        dockerfile_path.write_text(
            self.dockerfile_generator.generate(self.descriptor), encoding="utf-8"
        )
        log.debug(f"Wrote {dockerfile_path}")
        return dockerfile_path

    def stage_files(
        self,
        output_dir: Union[str, Path],
        artifact_path: Optional[Union[str, Path]] = None,
    ) -> List[Path]:
        """
        Copy the artifact and embedded files flat into the build context.

        Args:
            output_dir: Build context directory
            artifact_path: Primary artifact to copy under its descriptor name

        Returns:
            Paths of the staged files

        Raises:
            ArtifactError: If a source is missing or two sources share a file name
        """
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        copies = []
        if artifact_path is not None:
            copies.append((Path(artifact_path), self.descriptor.artifact_name))
        copies.extend(
            (Path(entry.source), entry.source_name) for entry in self.descriptor.files
        )

        seen = set()
        for _, name in copies:
            if name in seen:
                raise ArtifactError(f"Duplicate file name in build context: {name}")
            seen.add(name)

        staged = []
        for source, name in copies:
            if not source.is_file():
                raise ArtifactError(f"File not found: {source}")
            target = output_dir / name
            shutil.copy2(source, target)
            staged.append(target)
            log.debug(f"Staged {source} -> {target}")

        return staged

    def create(
        self,
        output_dir: Union[str, Path],
        artifact_path: Optional[Union[str, Path]] = None,
        build: bool = False,
        push: bool = False,
    ) -> ArtifactResult:
        """
        Stage the build context and optionally build and push the image.

        Raises:
            ArtifactError: If staging fails
            EngineConnectionError: If the Docker engine cannot be reached
            EngineError: If the build or push fails
        """
        output_dir = Path(output_dir)
        log.info(f"Creating Docker artifacts for {self.descriptor.name}")

        staged = self.stage_files(output_dir, artifact_path)
        dockerfile = self.write_dockerfile(output_dir)
        result = ArtifactResult(
            output_dir=output_dir, dockerfile=dockerfile, staged_files=staged
        )

        if build or push:
            BuildOperation(output_dir, connector=self.connector).execute(self.descriptor)
            result.built = True

        if push:
            PushOperation(connector=self.connector).execute(self.descriptor)
            result.pushed = True

        return result
