"""Shared registry of ports assigned to worktrees.

The registry is a JSON file mapping a worktree key to the ports that
worktree was assigned::

    {"/src/app-feature": {"WEB_PORT": 3000, "API_PORT": 3001}}

Every port in the file is excluded when rendering another worktree.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..core.errors import RegistryError
from ..rendering.io import atomic_write_text

logger = logging.getLogger(__name__)


def _validate(data: object, path: Path) -> dict[str, dict[str, int]]:
    if not isinstance(data, dict):
        raise RegistryError(f"Port registry {path} must contain a JSON object")

    for worktree, ports in data.items():
        if not isinstance(ports, dict):
            raise RegistryError(
                f"Port registry {path}: entry for '{worktree}' must be an object"
            )
        for name, port in ports.items():
            if isinstance(port, bool) or not isinstance(port, int):
                raise RegistryError(
                    f"Port registry {path}: '{worktree}'.{name} is not an integer port"
                )

    return data


class PortRegistry:
    """Port assignments per worktree, persisted as JSON."""

    def __init__(self, path: Path, entries: dict[str, dict[str, int]] | None = None):
        self.path = path
        self.entries: dict[str, dict[str, int]] = entries or {}

    @classmethod
    def load(cls, path: Path) -> PortRegistry:
        """Load the registry, starting empty when the file does not exist."""
        if not path.exists():
            logger.debug(f"No port registry at {path}, starting empty")
            return cls(path)

        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RegistryError(f"Cannot read port registry {path}: {e}") from e

        try:
            data = json.loads(raw or "{}")
        except json.JSONDecodeError as e:
            raise RegistryError(f"Invalid JSON in port registry {path}: {e}") from e

        return cls(path, _validate(data, path))

    def used_ports(self, exclude: str | None = None) -> frozenset[int]:
        """All registered ports, optionally ignoring one worktree's own entry."""
        return frozenset(
            port
            for worktree, ports in self.entries.items()
            if worktree != exclude
            for port in ports.values()
        )

    def assign(self, worktree: str, ports: dict[str, int]) -> None:
        self.entries[worktree] = dict(ports)
        logger.debug(f"Registered {len(ports)} port(s) for {worktree}")

    def release(self, worktree: str) -> dict[str, int]:
        """Drop a worktree's assignments and return them."""
        released = self.entries.pop(worktree, {})
        logger.debug(f"Released {len(released)} port(s) for {worktree}")
        return released

    def to_json(self) -> str:
        return json.dumps(self.entries, indent=2, sort_keys=True)

    def save(self) -> None:
        atomic_write_text(self.path, self.to_json() + "\n")
