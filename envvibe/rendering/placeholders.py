"""Placeholder patterns recognized in ``.env.vibe`` templates.

Two placeholder forms are supported, with any amount of whitespace inside the
markers:

- ``{{ auto_port() }}`` requests a freshly allocated port. A trailing
  ``| default`` is accepted but ignored.
- ``{{ branch() }}`` inserts the branch name, falling back to the trimmed
  ``| default`` text when no branch is available.
"""

from __future__ import annotations

import re

from ..core.errors import PatternError

AUTO_PORT_PATTERN = r"\{\{\s*auto_port\(\)(?:\s*\|\s*[^}]*)?\s*\}\}"
BRANCH_PATTERN = r"\{\{\s*branch\(\)(?:\s*\|\s*([^}]*))?\s*\}\}"
ENV_VAR_PATTERN = r"^([A-Za-z_][A-Za-z0-9_]*)\s*="


def compile_pattern(source: str) -> re.Pattern[str]:
    """Compile a placeholder pattern.

    Args:
        source: Regular expression source

    Returns:
        Compiled pattern

    Raises:
        PatternError: If the expression is invalid
    """
    try:
        return re.compile(source)
    except re.error as e:
        raise PatternError(f"Regex error: {e}") from e


_auto_port_re = compile_pattern(AUTO_PORT_PATTERN)
_branch_re = compile_pattern(BRANCH_PATTERN)
_env_var_re = compile_pattern(ENV_VAR_PATTERN)


def has_port_placeholder(line: str) -> bool:
    return _auto_port_re.search(line) is not None


def variable_name(line: str) -> str | None:
    """Return the variable name of a ``NAME=value`` line, if any."""
    match = _env_var_re.match(line)
    return match.group(1) if match else None


def replace_first_port(line: str, port: int) -> str:
    """Replace only the first port placeholder on the line."""
    return _auto_port_re.sub(str(port), line, count=1)


def substitute_branch(line: str, branch_name: str) -> str:
    """Replace every branch placeholder on the line.

    A non-empty branch name always wins. Without one, the trimmed default is
    used; a placeholder with no default is left exactly as written.
    """

    def _replacement(match: re.Match[str]) -> str:
        if branch_name:
            return branch_name
        default = match.group(1)
        if default is not None:
            return default.strip()
        return match.group(0)

    return _branch_re.sub(_replacement, line)
