"""Local web server for Markdown previews.

This module provides a Flask application that renders Markdown from
posted text, local files and remote URLs, served by a werkzeug WSGI server
on a loopback port that is advertised through the port discovery file.
"""

from __future__ import annotations

import logging
import signal
import threading
from pathlib import Path
from typing import Callable, Optional

from flask import Flask, Response, redirect, request
from werkzeug.serving import BaseWSGIServer, make_server

from .exceptions import NotMarkdownError, RemoteFetchError, RenderError
from .port_discovery import PortAdvertisement, get_discovery_file_path
from .remote import fetch_markdown
from .renderer import PageRenderer

# Keep werkzeug from logging every request
log = logging.getLogger("werkzeug")
log.setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

MAX_MARKDOWN_BYTES = 10 * 1024 * 1024
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def _text_response(message: str, status: int) -> Response:
    return Response(message, status=status, mimetype="text/plain")


class PreviewServer:
    """Web server that renders Markdown as GitHub-styled HTML.

    Provides endpoints for:
    - The landing page with a URL form and a drop zone (``/``)
    - Rendering posted Markdown text (``POST /render``)
    - Rendering a Gist or raw URL, optionally for embedding (``/view?url=&embed=``)
    - Rendering a local file, optionally for embedding (``/local?file=&embed=``)

    Attributes:
        requested_port: Port asked for (0 lets the OS choose).
        actual_port: Port the listening socket is bound to.
        port_file: Where the bound port is advertised.
        app: Flask application instance.
    """

    def __init__(
        self,
        port: int = 0,
        host: str = "127.0.0.1",
        port_file: Path | None = None,
        handle_signals: bool = True,
    ) -> None:
        """Initialize the server.

        Args:
            port: Port number to listen on (0 for random available port).
            host: Interface to bind; loopback by default.
            port_file: Discovery file path (default: ~/.markhub/port).
            handle_signals: Install SIGINT/SIGTERM handlers while serving.
                Only honoured when started from the main thread.
        """
        self.requested_port = port
        self.actual_port = port
        self.host = host
        self.port_file = port_file or get_discovery_file_path()
        self.renderer = PageRenderer()
        self.app = Flask(__name__)
        self.app.config["MAX_CONTENT_LENGTH"] = MAX_MARKDOWN_BYTES
        self._handle_signals = handle_signals
        self._running = False
        self._server: BaseWSGIServer | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Set up Flask routes."""

        @self.app.route("/")
        def index():
            return self.renderer.index_page()

        @self.app.route("/favicon.svg")
        def favicon():
            return Response(self.renderer.favicon, mimetype="image/svg+xml")

        @self.app.route("/render", methods=["POST"])
        def render_posted():
            markdown_text = request.get_data(as_text=True)
            if not markdown_text:
                return _text_response("No markdown content provided", 400)
            try:
                return self.renderer.render(markdown_text)
            except RenderError as exc:
                return _text_response(f"Error rendering markdown: {exc}", 500)

        @self.app.route("/view")
        def view_url():
            url = request.args.get("url")
            if not url:
                return redirect("/")
            embed = request.args.get("embed") == "true"
            try:
                markdown_text = fetch_markdown(url)
            except NotMarkdownError as exc:
                return _text_response(f"Error: {exc}", 400)
            except RemoteFetchError as exc:
                logger.warning("Fetching %s failed: %s", url, exc)
                return _text_response(f"Error fetching URL: {exc}", 500)
            try:
                return self.renderer.render(markdown_text, embed=embed)
            except RenderError as exc:
                return _text_response(f"Error rendering markdown: {exc}", 500)

        @self.app.route("/local")
        def view_local():
            file_arg = request.args.get("file")
            if not file_arg:
                return redirect("/")
            embed = request.args.get("embed") == "true"
            file_path = Path(file_arg).expanduser().resolve()
            if not file_path.is_file():
                return _text_response(f"File not found: {file_path}", 404)
            try:
                markdown_text = file_path.read_text(encoding="utf-8")
                return self.renderer.render(
                    markdown_text,
                    title=f"{file_path.name} - MarkHub",
                    embed=embed,
                )
            except (OSError, UnicodeDecodeError, RenderError) as exc:
                return _text_response(f"Error reading file: {exc}", 500)

    def start(self, on_ready: Optional[Callable[[int], None]] = None) -> None:
        """Start the server (blocking).

        The port is advertised only once the socket is listening, and the
        advertisement is withdrawn when serving ends for any reason.

        Args:
            on_ready: Called with the bound port after it is advertised.
        """
        self._server = self._create_server()
        self.actual_port = self._server.server_port
        previous_handlers = self._install_signal_handlers()
        self._running = True
        try:
            with PortAdvertisement(self.actual_port, self.port_file):
                print(f"MarkHub running at http://localhost:{self.actual_port}")
                if on_ready is not None:
                    on_ready(self.actual_port)
                self._server.serve_forever()
        finally:
            self._running = False
            self._restore_signal_handlers(previous_handlers)

    def stop(self) -> None:
        """Stop the server."""
        self._running = False
        if self._server is not None:
            self._server.shutdown()

    def is_running(self) -> bool:
        """Check if server is running.

        Returns:
            True if running, False otherwise.
        """
        return self._running

    def test_client(self):
        """Get a test client for testing.

        Returns:
            Flask test client.
        """
        return self.app.test_client()

    def get_port(self) -> int:
        """Get the actual port number the server is using.

        Returns:
            Port number.
        """
        return self.actual_port

    def _create_server(self) -> BaseWSGIServer:
        try:
            return make_server(self.host, self.requested_port, self.app, threaded=True)
        except SystemExit:
            print(f"Port {self.requested_port} is occupied, finding free port...")
            return make_server(self.host, 0, self.app, threaded=True)
        except OSError as exc:
            if not _is_address_in_use(exc):
                raise
            print(f"Port {self.requested_port} is occupied, finding free port...")
            return make_server(self.host, 0, self.app, threaded=True)

    def _install_signal_handlers(self) -> dict[int, object]:
        if not self._handle_signals:
            return {}
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous = {}
        for signum in SHUTDOWN_SIGNALS:
            previous[signum] = signal.signal(signum, self._on_shutdown_signal)
        return previous

    @staticmethod
    def _restore_signal_handlers(previous: dict[int, object]) -> None:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)

    def _on_shutdown_signal(self, signum, _frame) -> None:
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        raise SystemExit(0)


def _is_address_in_use(exc: OSError) -> bool:
    if exc.errno in {98, 48}:  # Linux and macOS
        return True
    return "Address already in use" in str(exc)
