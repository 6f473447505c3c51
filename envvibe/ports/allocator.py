"""Random port allocation with a bounded number of attempts.

Candidates are drawn uniformly from the configured range and rejected when
they belong to another worktree, were already handed out in the current
render pass, or cannot be bound on loopback. The bind probe is a hint only:
nothing is reserved, so another process may still grab the port before the
worktree starts using it.
"""

from __future__ import annotations

import logging
import os
import random
import socket
from typing import AbstractSet

from tenacity import RetryError, retry, retry_if_exception_type, stop_after_attempt

from ..core.errors import NoAvailablePort
from ..core.models import PortRange

logger = logging.getLogger(__name__)

MAX_PORT_ATTEMPTS = 1000
PROBE_HOST = "127.0.0.1"


class PortRejected(Exception):
    """Raised for a candidate port that failed one of the checks."""

    def __init__(self, port: int, reason: str) -> None:
        super().__init__(f"port {port} rejected: {reason}")
        self.port = port
        self.reason = reason


def is_port_available(port: int) -> bool:
    """Check whether a port can currently be bound on loopback.

    The socket is released immediately, so a True result does not hold the
    port for the caller.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        if os.name != "nt":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((PROBE_HOST, port))
        except OSError:
            return False
    return True


@retry(
    retry=retry_if_exception_type(PortRejected),
    stop=stop_after_attempt(MAX_PORT_ATTEMPTS),
)
def _draw_port(
    used_ports: AbstractSet[int], file_ports: AbstractSet[int], port_range: PortRange
) -> int:
    port = random.randint(port_range.low, port_range.high)

    if port in used_ports:
        raise PortRejected(port, "used by another worktree")

    if port in file_ports:
        raise PortRejected(port, "already assigned in this file")

    if not is_port_available(port):
        raise PortRejected(port, "in use on this host")

    return port


def allocate(
    used_ports: AbstractSet[int], file_ports: AbstractSet[int], port_range: PortRange
) -> int:
    """Allocate a port that is free, unused, and unique within the file.

    Args:
        used_ports: Ports claimed elsewhere, never assigned
        file_ports: Ports already assigned during the current render pass
        port_range: Inclusive range to draw candidates from

    Returns:
        The allocated port number

    Raises:
        NoAvailablePort: If every attempt was rejected
    """
    try:
        port = _draw_port(used_ports, file_ports, port_range)
    except RetryError as e:
        logger.warning(
            f"No available port in {port_range} after {MAX_PORT_ATTEMPTS} attempts"
        )
        raise NoAvailablePort(MAX_PORT_ATTEMPTS) from e

    logger.debug(f"Allocated port {port}")
    return port
