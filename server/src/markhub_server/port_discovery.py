"""Port advertisement file used by clients to find a running server."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from types import TracebackType
from typing import Optional

logger = logging.getLogger(__name__)


def get_discovery_file_path() -> Path:
    """Get the path to the port discovery file.

    Returns:
        Path to ~/.markhub/port, unless MARKHUB_PORT_FILE or MARKHUB_HOME
        point somewhere else.
    """
    env_file = os.getenv("MARKHUB_PORT_FILE")
    if env_file:
        return Path(env_file).expanduser()
    env_dir = os.getenv("MARKHUB_HOME")
    if env_dir:
        return Path(env_dir).expanduser() / "port"
    return Path.home() / ".markhub" / "port"


def write_port_file(port: int, port_file: Optional[Path] = None) -> None:
    """Write the server port to the discovery file.

    Args:
        port: The port number to write.
        port_file: Optional custom path (default: ~/.markhub/port).
    """
    if port_file is None:
        port_file = get_discovery_file_path()

    port_file.parent.mkdir(parents=True, exist_ok=True)
    port_file.write_text(str(port), encoding="utf-8")


def read_port_file(port_file: Optional[Path] = None) -> Optional[int]:
    """Read the server port from the discovery file.

    Args:
        port_file: Optional custom path (default: ~/.markhub/port).

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
        logger.warning("Ignoring unreadable port file %s: %s", port_file, exc)
        return None

    if not (1 <= port <= 65535):
        logger.warning("Ignoring out-of-range port %s in %s", port, port_file)
        return None

    return port


def remove_port_file(port_file: Optional[Path] = None) -> bool:
    """Delete the discovery file if present.

    Returns:
        True if a file was removed.
    """
    if port_file is None:
        port_file = get_discovery_file_path()

    try:
        port_file.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("Could not remove port file %s: %s", port_file, exc)
        return False
    return True


class PortAdvertisement:
    """Publishes a bound port for the lifetime of a ``with`` block.

    The file is written on enter and removed on exit, but only while it
    still names this port; a newer server's advertisement is left in place.
    A process killed without unwinding leaves the file behind.
    """

    def __init__(self, port: int, port_file: Optional[Path] = None) -> None:
        self.port = port
        self.port_file = port_file or get_discovery_file_path()
        self._published = False

    def publish(self) -> None:
        write_port_file(self.port, self.port_file)
        self._published = True
        logger.info("Advertised port %s in %s", self.port, self.port_file)

    def release(self) -> None:
        if not self._published:
            return
        self._published = False
        current = read_port_file(self.port_file)
        if current is not None and current != self.port:
            logger.info(
                "Port file %s now names port %s; leaving it in place",
                self.port_file,
                current,
            )
            return
        if remove_port_file(self.port_file):
            logger.info("Removed port file %s", self.port_file)

    def __enter__(self) -> "PortAdvertisement":
        self.publish()
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.release()
