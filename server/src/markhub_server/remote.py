"""Fetching Markdown from Gist and raw URLs."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

import requests

from .exceptions import NotMarkdownError, RemoteFetchError

logger = logging.getLogger(__name__)

GIST_RAW_HOST = "https://gist.githubusercontent.com"
FETCH_TIMEOUT_S = 15.0


def resolve_fetch_url(url: str) -> str:
    """Rewrite a Gist page URL to its raw content URL.

    ``https://gist.github.com/user/abc123`` becomes
    ``https://gist.githubusercontent.com/user/abc123/raw``. Raw links and
    everything else are returned unchanged.
    """
    if "gist.github.com" not in url or "/raw" in url:
        return url
    parsed = urlparse(url)
    path = parsed.path.rstrip("/")
    if len(path.split("/")) < 3:
        return url
    return f"{GIST_RAW_HOST}{path}/raw"


def looks_like_html(text: str) -> bool:
    return text.lstrip()[:15].lower() == "<!doctype html>"


def fetch_markdown(url: str, timeout: float = FETCH_TIMEOUT_S) -> str:
    """Download Markdown text from ``url``.

    Raises:
        RemoteFetchError: If the request fails or returns an error status.
        NotMarkdownError: If the response is an HTML page.
    """
    fetch_url = resolve_fetch_url(url)
    logger.debug("Fetching %s (requested %s)", fetch_url, url)
    try:
        response = requests.get(fetch_url, timeout=timeout)
    except requests.RequestException as exc:
        raise RemoteFetchError(url, str(exc)) from exc
    if not response.ok:
        raise RemoteFetchError(
            url, f"Failed to fetch content ({response.status_code})"
        )
    text = response.text
    if looks_like_html(text):
        raise NotMarkdownError(url)
    return text
