"""Port discovery utilities for client."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def get_discovery_file_path() -> Path:
    """Get the path to the port discovery file.

    Returns:
        Path to ~/.markhub/port
    """
    env_file = os.getenv("MARKHUB_PORT_FILE")
    if env_file:
        return Path(env_file).expanduser()
    env_dir = os.getenv("MARKHUB_HOME")
    if env_dir:
        return Path(env_dir).expanduser() / "port"
    return Path.home() / ".markhub" / "port"


def read_port_from_discovery_file(port_file: Optional[Path] = None) -> Optional[int]:
    """Read the server port from the discovery file.

    A missing file means no server is known. Unreadable or corrupt content
    is logged and treated the same way.

    Returns:
        The port number, or None if file doesn't exist or is invalid.
    """
    if port_file is None:
        port_file = get_discovery_file_path()

    if not port_file.exists():
        return None

    try:
        port = int(port_file.read_text(encoding="utf-8").strip())
    except (ValueError, OSError) as exc:
        logger.debug("Ignoring unreadable port file %s: %s", port_file, exc)
        return None

    if not (1 <= port <= 65535):
        logger.debug("Ignoring out-of-range port %s in %s", port, port_file)
        return None

    return port
