"""Opening preview targets against a discovered server."""

from __future__ import annotations

import html
import re
import webbrowser
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import quote

from .discovery import DiscoveryService, ServerHandle

EMBED_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>__TITLE__</title>
    <style>
        body, html {
            margin: 0;
            padding: 0;
            width: 100%;
            height: 100%;
            overflow: hidden;
            background: #ffffff;
        }
        iframe {
            width: 100%;
            height: 100%;
            border: none;
            opacity: 0;
            transition: opacity 0.2s ease-in;
        }
        iframe.loaded {
            opacity: 1;
        }
        .loading {
            position: absolute;
            top: 50%;
            left: 50%;
            transform: translate(-50%, -50%);
            text-align: center;
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
            color: #586069;
        }
        .loading.hidden {
            display: none;
        }
        .spinner {
            width: 40px;
            height: 40px;
            margin: 0 auto 16px;
            border: 3px solid #e1e4e8;
            border-top-color: #0366d6;
            border-radius: 50%;
            animation: spin 0.8s linear infinite;
        }
        @keyframes spin {
            to { transform: rotate(360deg); }
        }
    </style>
</head>
<body>
    <div class="loading" id="loading">
        <div class="spinner"></div>
        <div>Loading preview...</div>
    </div>
    <iframe id="preview" src="__URL__" sandbox="allow-scripts allow-same-origin"></iframe>
    <script>
        const iframe = document.getElementById('preview');
        const loading = document.getElementById('loading');
        function reveal() {
            loading.classList.add('hidden');
            iframe.classList.add('loaded');
        }
        window.addEventListener('message', function(event) {
            if (event.data === 'markhub-ready') {
                reveal();
            }
        });
        setTimeout(reveal, __FALLBACK_MS__);
    </script>
</body>
</html>
"""

READY_FALLBACK_MS = 2000

_PLACEHOLDER = re.compile(r"__([A-Z_]+?)__")


def is_remote_target(target: str) -> bool:
    return target.startswith(("http://", "https://"))


def view_url(handle: ServerHandle, target: str, *, embed: bool = False) -> str:
    """URL on the server that renders ``target``.

    Local files map to ``/local`` and http(s) URLs to ``/view``; both take
    the embed flag.

    Raises:
        FileNotFoundError: If ``target`` is neither an existing file nor a URL.
    """
    if is_remote_target(target):
        url = f"{handle.base_url}/view?url={quote(target, safe='')}"
    else:
        path = Path(target).expanduser()
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {target}")
        url = f"{handle.base_url}/local?file={quote(str(path.resolve()), safe='')}"
    if embed:
        url += "&embed=true"
    return url


def build_embed_page(url: str, title: str = "MarkHub Preview") -> str:
    """HTML for an editor preview pane that frames ``url``.

    A spinner shows until the framed page reports it is ready, or until a
    short fallback delay passes.
    """
    values = {
        "TITLE": html.escape(title),
        "FALLBACK_MS": str(READY_FALLBACK_MS),
        "URL": html.escape(url, quote=True),
    }
    return _PLACEHOLDER.sub(
        lambda match: values.get(match.group(1), match.group(0)), EMBED_PAGE_TEMPLATE
    )


def open_preview(
    target: str,
    service: Optional[DiscoveryService] = None,
    *,
    opener: Callable[[str], object] = webbrowser.open,
) -> str:
    """Open ``target`` in a browser tab, starting a server if needed.

    Returns:
        The URL that was opened.
    """
    service = service or DiscoveryService()
    handle = service.ensure_running_sync()
    url = view_url(handle, target)
    opener(url)
    return url


def embed_preview(file_path: str, service: Optional[DiscoveryService] = None) -> str:
    """Embeddable preview page for a local Markdown file or remote URL."""
    service = service or DiscoveryService()
    handle = service.ensure_running_sync()
    url = view_url(handle, file_path, embed=True)
    return build_embed_page(url, title=f"Preview: {Path(file_path).name}")
