"""Main CLI application."""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

import typer
from typing_extensions import Annotated

from ..core.errors import EnvVibeError
from ..environment.git import current_branch
from ..environment.registry import PortRegistry
from ..rendering import engine
from ..settings import Settings
from .parsers import parse_file_mode, parse_port, parse_port_range

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="envvibe",
    help="Render .env.vibe templates with per-worktree ports and branch names.",
)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def _load_registry(registry_path: str) -> PortRegistry:
    path = Path(registry_path) if registry_path else get_settings().registry_path
    try:
        return PortRegistry.load(path)
    except EnvVibeError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e


def _worktree_key(worktree: Path) -> str:
    return str(worktree.resolve())


RegistryOption = Annotated[
    str,
    typer.Option(
        "--registry",
        help="Port registry file (default: ENVVIBE_REGISTRY_PATH or ~/.envvibe/ports.json).",
        metavar="FILE",
    ),
]


@app.callback()
def configure(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


@app.command()
def render(
    worktree: Annotated[
        Path,
        typer.Argument(help="Worktree directory containing the template."),
    ] = Path("."),
    template: Annotated[
        str,
        typer.Option(
            "--template",
            help="Template path (default: WORKTREE/.env.vibe).",
            metavar="FILE",
        ),
    ] = "",
    output: Annotated[
        str,
        typer.Option(
            "--output",
            help="Output path (default: WORKTREE/.env).",
            metavar="FILE",
        ),
    ] = "",
    branch: Annotated[
        str | None,
        typer.Option(
            "--branch",
            help="Branch name (default: detected with git; empty for none).",
        ),
    ] = None,
    port_range: Annotated[
        str,
        typer.Option(
            "--port-range",
            help="Inclusive port range (default: 1024-65535).",
            metavar="LOW-HIGH",
        ),
    ] = "",
    used_ports: Annotated[
        list[str],
        typer.Option(
            "--used-port",
            help="Port that must not be assigned. Repeatable.",
            metavar="PORT",
        ),
    ] = [],
    registry_path: RegistryOption = "",
    no_registry: Annotated[
        bool,
        typer.Option(
            "--no-registry",
            help="Neither read nor update the port registry.",
        ),
    ] = False,
    file_mode: Annotated[
        str,
        typer.Option(
            "--mode",
            help="Output file permissions in octal (default: 0644).",
            metavar="OCTAL",
        ),
    ] = "",
) -> None:
    """Render a worktree's .env.vibe template and record its ports."""
    settings = get_settings()

    worktree_path = worktree.resolve()
    key = _worktree_key(worktree)
    template_path = Path(template) if template else worktree_path / settings.template_name
    output_path = Path(output) if output else worktree_path / settings.output_name

    branch_name = branch if branch is not None else current_branch(worktree_path)
    logger.debug(f"Branch: {branch_name or '(none)'}")

    if port_range:
        port_range_value = parse_port_range(port_range)
    else:
        try:
            port_range_value = settings.port_range()
        except ValueError as e:
            logger.error(f"Invalid ENVVIBE_PORT_RANGE_START/END: {e}")
            raise typer.Exit(code=1) from e
    mode = parse_file_mode(file_mode) if file_mode else settings.file_mode
    excluded = {parse_port(value) for value in used_ports}

    registry = None if no_registry else _load_registry(registry_path)
    if registry is not None:
        excluded |= registry.used_ports(exclude=key)

    logger.debug(f"Excluding {len(excluded)} port(s), range {port_range_value}")

    try:
        result = engine.render_file(
            template_path,
            output_path,
            branch_name=branch_name,
            used_ports=excluded,
            port_range=port_range_value,
            file_mode=mode,
        )
    except (EnvVibeError, OSError, UnicodeDecodeError) as e:
        logger.error(f"Render failed: {e}")
        raise typer.Exit(code=1) from e

    if registry is not None:
        registry.assign(key, result.assigned_ports)
        registry.save()

    logger.info(f"Assigned {len(result.assigned_ports)} port(s) for {key}")
    typer.echo(result.assigned_ports_json())


@app.command()
def release(
    worktree: Annotated[
        Path,
        typer.Argument(help="Worktree whose ports should be released."),
    ] = Path("."),
    registry_path: RegistryOption = "",
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Release even when ENVVIBE_RELEASE_PORTS_ON_COMPLETION is false.",
        ),
    ] = False,
) -> None:
    """Release the ports assigned to a worktree."""
    if not get_settings().release_ports_on_completion and not force:
        logger.info("Port release on completion is disabled; use --force to override")
        return

    registry = _load_registry(registry_path)
    key = _worktree_key(worktree)
    released = registry.release(key)
    if released:
        registry.save()
    logger.info(f"Released {len(released)} port(s) for {key}")
    typer.echo(json.dumps(released))


@app.command()
def ports(registry_path: RegistryOption = "") -> None:
    """Show all registered port assignments."""
    typer.echo(_load_registry(registry_path).to_json())


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
