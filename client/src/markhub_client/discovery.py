"""Locate a running preview server, starting one when none answers."""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from .exceptions import ServerSpawnError, ServerStartTimeoutError
from .launcher import ProcessHandle, ProcessLauncher, SubprocessLauncher
from .port_discovery import get_discovery_file_path, read_port_from_discovery_file
from .probe import PROBE_TIMEOUT_S, is_server_running
from .retry import retry_until

logger = logging.getLogger(__name__)

POLL_INTERVAL_S = 0.5
MAX_POLL_ATTEMPTS = 20
MIN_PROBE_TIMEOUT_S = 0.1


def default_server_command() -> list[str]:
    """Command used to start a server, honouring MARKHUB_SERVER_COMMAND."""
    env_command = os.getenv("MARKHUB_SERVER_COMMAND")
    if env_command:
        return shlex.split(env_command)
    return [sys.executable, "-m", "markhub_server"]


@dataclass(frozen=True)
class ServerHandle:
    """A port known to have a live server behind it."""

    port: int
    spawned: bool = False

    @property
    def base_url(self) -> str:
        return f"http://localhost:{self.port}"


class DiscoveryService:
    """Finds a reachable preview server for one client invocation.

    The port file is read and its port probed; if nothing answers, a new
    server is launched in the background and the file is polled until a
    probe succeeds or the attempt budget runs out. Nothing is cached
    between calls.

    Two clients racing here may each start a server. The later one's
    advertisement replaces the earlier one's, and both clients end up
    with a working port.
    """

    def __init__(
        self,
        port_file: Path | None = None,
        *,
        probe_timeout_s: float = PROBE_TIMEOUT_S,
        poll_interval_s: float = POLL_INTERVAL_S,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        launcher: ProcessLauncher | None = None,
        server_command: Sequence[str] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if poll_interval_s < 0:
            raise ValueError("poll_interval_s must be >= 0")
        self.port_file = port_file or get_discovery_file_path()
        self.probe_timeout_s = probe_timeout_s
        self.poll_interval_s = poll_interval_s
        self.max_attempts = max_attempts
        self.launcher = launcher or SubprocessLauncher()
        self.server_command = list(server_command or default_server_command())
        self._sleep = sleep

    def read_advertised_port(self) -> Optional[int]:
        return read_port_from_discovery_file(self.port_file)

    async def probe(self, port: int, *, timeout_s: Optional[float] = None) -> bool:
        timeout = self.probe_timeout_s if timeout_s is None else timeout_s
        return await is_server_running(port, timeout_s=timeout)

    async def find_running_server(self, *, timeout_s: Optional[float] = None) -> Optional[int]:
        """Port from the discovery file, if a server answers on it."""
        port = self.read_advertised_port()
        if port is None:
            return None
        if await self.probe(port, timeout_s=timeout_s):
            return port
        logger.debug("Advertised port %s in %s is not answering", port, self.port_file)
        return None

    def start_server(self) -> ProcessHandle:
        """Launch a server that advertises into our port file.

        Raises:
            ServerSpawnError: If the process cannot be started.
        """
        command, *args = self.server_command
        args = [*args, "--no-browser", "--port-file", str(self.port_file)]
        env = {
            "MARKHUB_NO_BROWSER": "1",
            "MARKHUB_PORT_FILE": str(self.port_file),
        }
        try:
            handle = self.launcher.launch(command, args, env)
        except (OSError, ValueError) as exc:
            raise ServerSpawnError([command, *args], exc) from exc
        logger.info("Started MarkHub server (pid %s)", getattr(handle, "pid", "?"))
        return handle

    def _check_process_alive(self, process: ProcessHandle) -> None:
        """Fail fast when the launched server has already exited with an error.

        A clean exit is tolerated: the command may be a wrapper that hands
        off to a detached server.
        """
        returncode = process.poll()
        if returncode:
            raise ServerSpawnError(
                self.server_command,
                ChildProcessError(f"server exited with status {returncode}"),
            )

    async def ensure_running(self) -> ServerHandle:
        """Return a handle to a live server, starting one if needed.

        Raises:
            ServerSpawnError: If a server had to be started and could not be.
            ServerStartTimeoutError: If the started server never answered.
        """
        port = await self.find_running_server()
        if port is not None:
            logger.debug("Reusing MarkHub server on port %s", port)
            return ServerHandle(port=port, spawned=False)

        process = self.start_server()
        loop = asyncio.get_running_loop()
        budget_s = self.max_attempts * self.poll_interval_s
        deadline = loop.time() + budget_s

        async def poll_once() -> Optional[int]:
            # a hung server must not stretch the budget past the last tick
            remaining = deadline - loop.time()
            probe_timeout = min(
                self.probe_timeout_s,
                max(remaining, self.poll_interval_s, MIN_PROBE_TIMEOUT_S),
            )
            port = await self.find_running_server(timeout_s=probe_timeout)
            if port is None:
                self._check_process_alive(process)
            return port

        port = await retry_until(
            poll_once,
            attempts=self.max_attempts,
            delay_s=self.poll_interval_s,
            sleep=self._sleep or asyncio.sleep,
            timeout_s=budget_s,
        )
        if port is None:
            raise ServerStartTimeoutError(self.max_attempts, self.poll_interval_s)
        logger.info("MarkHub server is answering on port %s", port)
        return ServerHandle(port=port, spawned=True)

    def ensure_running_sync(self) -> ServerHandle:
        """Blocking wrapper around :meth:`ensure_running`."""
        return asyncio.run(self.ensure_running())
