"""Template rendering engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet

from ..core.models import PortRange, RenderResult
from ..ports.allocator import allocate
from . import placeholders
from .io import atomic_write_text, read_template

logger = logging.getLogger(__name__)


def render_line(
    line: str,
    branch_name: str,
    used_ports: AbstractSet[int],
    file_ports: set[int],
    assigned_ports: dict[str, int],
    port_range: PortRange,
) -> str:
    """Render a single template line.

    Port placeholders are replaced one at a time, each with its own port.
    Only the variable name at the start of the line is recorded, so a line
    holding several ports maps that name to the last port allocated.
    Branch placeholders are then replaced in a single pass.

    Args:
        line: Template line
        branch_name: Branch name, empty when unknown
        used_ports: Ports that must never be assigned
        file_ports: Ports assigned so far in this pass (updated in place)
        assigned_ports: Variable-to-port mapping (updated in place)
        port_range: Inclusive range for new ports

    Returns:
        The rendered line
    """
    while placeholders.has_port_placeholder(line):
        port = allocate(used_ports, file_ports, port_range)
        file_ports.add(port)

        name = placeholders.variable_name(line)
        if name is not None:
            assigned_ports[name] = port

        line = placeholders.replace_first_port(line, port)

    return placeholders.substitute_branch(line, branch_name)


def render(
    content: str,
    branch_name: str = "",
    used_ports: AbstractSet[int] = frozenset(),
    port_range: PortRange | None = None,
) -> RenderResult:
    """Render an ``.env.vibe`` template.

    Args:
        content: Raw template text
        branch_name: Branch name, empty to fall back to placeholder defaults
        used_ports: Ports claimed by other worktrees
        port_range: Inclusive range for new ports (default: 1024-65535)

    Returns:
        Rendered content and the ports assigned to each variable

    Raises:
        NoAvailablePort: If a port placeholder could not be satisfied
    """
    port_range = port_range or PortRange()
    file_ports: set[int] = set()
    assigned_ports: dict[str, int] = {}

    lines = [
        render_line(line, branch_name, used_ports, file_ports, assigned_ports, port_range)
        for line in content.split("\n")
    ]

    logger.debug(f"Rendered {len(lines)} line(s), assigned {len(file_ports)} port(s)")

    return RenderResult(processed_content="\n".join(lines), assigned_ports=assigned_ports)


def render_file(
    template_path: Path,
    output_path: Path,
    branch_name: str = "",
    used_ports: AbstractSet[int] = frozenset(),
    port_range: PortRange | None = None,
    file_mode: int = 0o644,
) -> RenderResult:
    """Render a template file and write the result atomically.

    Nothing is written when rendering fails.

    Args:
        template_path: Template file path
        output_path: Output file path
        branch_name: Branch name, empty when unknown
        used_ports: Ports claimed by other worktrees
        port_range: Inclusive range for new ports
        file_mode: Output file permissions

    Returns:
        The render result
    """
    logger.debug(f"Rendering template: {template_path}")

    result = render(read_template(template_path), branch_name, used_ports, port_range)
    atomic_write_text(output_path, result.processed_content, mode=file_mode)
    logger.info(f"Rendered {template_path} → {output_path}")

    return result
