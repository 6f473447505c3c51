"""envvibe - Worktree environment template renderer.

Renders ``.env.vibe`` templates, allocating free ports for ``{{ auto_port() }}``
and substituting the branch name for ``{{ branch() }}``.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

from .core.errors import EnvVibeError, NoAvailablePort, PatternError, RegistryError
from .core.models import (
    DEFAULT_PORT_RANGE_END,
    DEFAULT_PORT_RANGE_START,
    PortRange,
    RenderResult,
)
from .rendering.engine import render

# Re-export main CLI entry point
from .cli import main

__all__ = [
    "DEFAULT_PORT_RANGE_END",
    "DEFAULT_PORT_RANGE_START",
    "EnvVibeError",
    "NoAvailablePort",
    "PatternError",
    "PortRange",
    "RegistryError",
    "RenderResult",
    "main",
    "render",
]
