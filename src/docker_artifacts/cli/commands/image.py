"""Dockerfile generation, image build and push commands."""

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from ...artifacts import DockerArtifactHandler
from ...dockerfile import DockerfileGenerator
from ...engine.operations import PushOperation
from ...exceptions import DockerArtifactError
from ...models import BuildDescriptor

console = Console()


def load_descriptor(path: Path) -> BuildDescriptor:
    """Load a descriptor, exiting with an error message if it is invalid."""
    try:
        return BuildDescriptor.from_file(path)
    except OSError as e:
        console.print(f"[red]Error:[/red] Cannot read descriptor {path}: {escape(str(e))}")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid descriptor {path}")
        console.print(str(e), markup=False)
        raise typer.Exit(1)


def generate_command(descriptor_path: Path, output: Optional[Path] = None):
    descriptor = load_descriptor(descriptor_path)
    dockerfile = DockerfileGenerator().generate(descriptor)

    if output is None:
        typer.echo(dockerfile, nl=False)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(dockerfile, encoding="utf-8")
    console.print(f"[green]✓[/green] Dockerfile written to {output}")


def build_command(
    descriptor_path: Path,
    output_dir: Path,
    artifact: Optional[Path] = None,
    push: bool = False,
):
    descriptor = load_descriptor(descriptor_path)
    handler = DockerArtifactHandler(descriptor)

    try:
        with console.status(f"Building {descriptor.name}..."):
            result = handler.create(output_dir, artifact, build=True, push=push)
    except DockerArtifactError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Built {descriptor.name}")
    console.print(f"   Dockerfile: {result.dockerfile}")
    if result.pushed:
        console.print(f"[green]✓[/green] Pushed {descriptor.name}")


def push_command(descriptor_path: Path):
    descriptor = load_descriptor(descriptor_path)

    try:
        with console.status(f"Pushing {descriptor.name}..."):
            PushOperation().execute(descriptor)
    except DockerArtifactError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Pushed {descriptor.name}")
