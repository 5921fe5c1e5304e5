"""Liveness check for an advertised preview server port."""

from __future__ import annotations

import asyncio
import logging

import requests

logger = logging.getLogger(__name__)

PROBE_TIMEOUT_S = 1.0


def _get(url: str, timeout_s: float) -> int:
    response = requests.get(url, timeout=timeout_s, allow_redirects=False)
    response.close()
    return response.status_code


async def is_server_running(
    port: int | str,
    *,
    host: str = "localhost",
    timeout_s: float = PROBE_TIMEOUT_S,
) -> bool:
    """Return True if an HTTP server answers on ``port``.

    Any response counts, whatever its status. Connection failures, bad
    port values and requests that outlive ``timeout_s`` all yield False;
    a response arriving after the timeout is ignored. Never raises.
    """
    try:
        port_number = int(port)
    except (TypeError, ValueError):
        return False
    if not (1 <= port_number <= 65535):
        return False

    url = f"http://{host}:{port_number}/"
    try:
        status = await asyncio.wait_for(
            asyncio.to_thread(_get, url, timeout_s), timeout=timeout_s
        )
    except asyncio.TimeoutError:
        logger.debug("Probe of %s timed out after %ss", url, timeout_s)
        return False
    except (requests.RequestException, OSError) as exc:
        logger.debug("Probe of %s failed: %s", url, exc)
        return False
    logger.debug("Probe of %s answered with %s", url, status)
    return True
