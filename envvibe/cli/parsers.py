"""CLI argument parsers and validators."""

from __future__ import annotations

import typer

from ..core.models import PortRange


def parse_port_range(value: str) -> PortRange:
    """Parse an inclusive port range in format LOW-HIGH."""
    if "-" not in value:
        raise typer.BadParameter(f"Must be LOW-HIGH, got: {value!r}")
    low, high = value.split("-", 1)
    try:
        return PortRange(low=int(low), high=int(high))
    except ValueError as e:
        raise typer.BadParameter(f"Invalid port range {value!r}: {e}") from e


def parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid port: {value!r}") from e
    if not 0 <= port <= 65535:
        raise typer.BadParameter(f"Port out of range 0-65535: {port}")
    return port


def parse_file_mode(value: str) -> int:
    """Parse octal file mode string."""
    try:
        return int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid octal mode: {value!r}") from e
