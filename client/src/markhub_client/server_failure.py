"""Helpers for reporting a preview server that could not be reached."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn


def exit_with_discovery_failure(
    summary: str,
    port_file: Path | None,
    error: BaseException | None = None,
) -> NoReturn:
    """Print a detailed failure report and exit immediately."""
    lines = [
        "MarkHub: Failed to open a preview.",
        "",
        "Details:",
        f"- Summary: {summary}",
    ]
    if port_file is not None:
        lines.append(f"- Port file: {port_file}")
    if error is not None:
        lines.append(f"- Exception: {type(error).__name__}: {error}")

    lines.extend(
        [
            "",
            "Most likely causes:",
            "1. The server command could not be found or failed on startup.",
            "2. A required package (flask, markdown, pygments) is not installed.",
            "3. The port file location is not writable.",
            "",
            "Potential fixes:",
            "1. Run `python -m markhub_server` directly and check its output.",
            "2. Set MARKHUB_SERVER_COMMAND to a working server command.",
            "3. Set MARKHUB_PORT_FILE or MARKHUB_HOME to a writable location.",
            "",
            "Exiting now.",
        ]
    )

    print("\n".join(lines), file=sys.stderr)
    sys.stderr.flush()
    raise SystemExit(1)
