"""Pytest fixtures for shared test state."""

from __future__ import annotations

import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest

MARKHUB_ENV_VARS = (
    "MARKHUB_PORT_FILE",
    "MARKHUB_HOME",
    "MARKHUB_NO_BROWSER",
    "MARKHUB_SERVER_COMMAND",
)


@pytest.fixture(autouse=True)
def _isolate_markhub_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real ~/.markhub/port."""
    for name in MARKHUB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MARKHUB_HOME", str(tmp_path / "markhub-home"))


def skip_if_socket_unavailable() -> None:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("127.0.0.1", 0))
    except PermissionError:
        pytest.skip("Socket bind not permitted in this environment")


@pytest.fixture
def closed_port() -> int:
    """A port that had a listener a moment ago and has none now."""
    skip_if_socket_unavailable()
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


class _NotFoundHandler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:  # noqa: N802
        self.send_response(404)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        return


@pytest.fixture
def live_http_port():
    """Port of a throwaway HTTP server that answers every GET with 404."""
    skip_if_socket_unavailable()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _NotFoundHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield int(server.server_address[1])
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2)


@pytest.fixture
def silent_port():
    """Port that accepts connections but never sends a response."""
    skip_if_socket_unavailable()
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    try:
        yield int(sock.getsockname()[1])
    finally:
        sock.close()
