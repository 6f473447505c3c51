"""Error types raised while rendering environment templates."""

from __future__ import annotations


class EnvVibeError(Exception):
    """Base class for envvibe failures."""


class NoAvailablePort(EnvVibeError):
    """Raised when no free port could be found within the attempt budget."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Failed to find available port after {attempts} attempts")
        self.attempts = attempts


class PatternError(EnvVibeError):
    """Raised when a placeholder pattern fails to compile."""


class RegistryError(EnvVibeError):
    """Raised when the port registry file cannot be read or is malformed."""
