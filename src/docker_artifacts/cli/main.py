"""Main CLI entry point for docker-artifacts."""

from importlib import metadata
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console


def get_version() -> str:
    """Get the package version from metadata."""
    try:
        return metadata.version("docker-artifacts")
    except metadata.PackageNotFoundError:
        return "unknown"


console = Console()

# command: docker-artifacts
app = typer.Typer(
    name="docker-artifacts",
    help="Generate Dockerfiles and build and push Docker images from build descriptors",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command("generate")
def generate_cmd(
    descriptor: Path = typer.Argument(..., help="Build descriptor JSON file"),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the Dockerfile here instead of stdout"
    ),
):
    """Generate a Dockerfile from a build descriptor."""
    from .commands.image import generate_command

    return generate_command(descriptor, output)


@app.command("build")
def build_cmd(
    descriptor: Path = typer.Argument(..., help="Build descriptor JSON file"),
    output_dir: Path = typer.Option(
        Path("docker"), "--output-dir", "-d", help="Build context directory"
    ),
    artifact: Optional[Path] = typer.Option(
        None, "--artifact", "-a", help="Primary artifact to copy into the build context"
    ),
    push: bool = typer.Option(False, "--push", help="Push the image after building"),
):
    """Stage the build context and build the Docker image."""
    from .commands.image import build_command

    return build_command(descriptor, output_dir, artifact, push)


@app.command("push")
def push_cmd(
    descriptor: Path = typer.Argument(..., help="Build descriptor JSON file"),
):
    """Push an already built Docker image."""
    from .commands.image import push_command

    return push_command(descriptor)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
):
    """Generate Dockerfiles and build and push Docker images."""
    if version:
        console.print(f"docker-artifacts v{get_version()}")
        raise typer.Exit()


if __name__ == "__main__":
    app()
