"""Starting the preview server as a detached background process."""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class ProcessHandle(Protocol):
    """What callers may do with a launched process."""

    pid: int

    def poll(self) -> Optional[int]:
        ...


class ProcessLauncher(Protocol):
    """Starts a process without waiting for it."""

    def launch(
        self,
        command: str,
        args: Sequence[str],
        env: Mapping[str, str],
    ) -> ProcessHandle:
        ...


class SubprocessLauncher:
    """Launches detached processes with ``subprocess.Popen``.

    The child gets its own session so it outlives the client, and its
    output is discarded.
    """

    def launch(
        self,
        command: str,
        args: Sequence[str],
        env: Mapping[str, str],
    ) -> ProcessHandle:
        full_env = os.environ.copy()
        full_env.update(env)
        popen_kwargs: dict[str, object] = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
            "env": full_env,
        }
        if os.name == "nt":
            popen_kwargs["creationflags"] = (
                subprocess.CREATE_NEW_PROCESS_GROUP | subprocess.DETACHED_PROCESS
            )
        else:
            popen_kwargs["start_new_session"] = True
        process = subprocess.Popen([command, *args], **popen_kwargs)
        logger.info("Launched %s (pid %s)", command, process.pid)
        return process
