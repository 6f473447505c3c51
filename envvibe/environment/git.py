"""Branch name detection for worktrees."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


def current_branch(cwd: Path) -> str:
    """Return the checked-out branch of the repository at ``cwd``.

    Returns an empty string when git is unavailable, ``cwd`` is not a
    repository, or HEAD is detached, so template defaults apply.
    """
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug(f"Could not determine branch in {cwd}: {e}")
        return ""

    branch = result.stdout.strip()
    if branch == "HEAD":
        logger.debug(f"Detached HEAD in {cwd}, no branch name available")
        return ""
    return branch
