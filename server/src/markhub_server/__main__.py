#!/usr/bin/env python3
"""Launch the MarkHub preview server.

This script starts the Flask web server on an OS-assigned loopback port,
advertises the port for clients, and opens the initial view in a browser.
"""

import argparse
import logging
import os
import sys
import webbrowser
from pathlib import Path
from urllib.parse import quote

from .port_discovery import get_discovery_file_path
from .preview_server import PreviewServer


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Start the MarkHub Markdown preview server"
    )
    parser.add_argument(
        "target",
        nargs="?",
        help="Markdown file or http(s) URL to open once the server is up",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=0,
        help="Port to listen on (default: 0, any free port)"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port-file",
        type=Path,
        default=None,
        help="Where to advertise the bound port (default: ~/.markhub/port)",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not open a browser tab on startup",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def browser_suppressed(args) -> bool:
    return bool(args.no_browser) or os.getenv("MARKHUB_NO_BROWSER") == "1"


def initial_view_path(target, *, out=None) -> str:
    """Path of the page to open first for a command-line target."""
    out = out or sys.stderr
    if not target:
        return "/"
    if Path(target).exists():
        absolute = str(Path(target).resolve())
        return f"/local?file={quote(absolute, safe='')}"
    if target.startswith(("http://", "https://")):
        return f"/view?url={quote(target, safe='')}"
    print(f"Error: File not found: {target}", file=out)
    return "/"


def _print_banner(args, port_file: Path, *, out) -> None:
    print("=" * 60, file=out)
    print("MarkHub - GitHub-styled Markdown preview", file=out)
    print("=" * 60, file=out)
    print(f"\nStarting server on {args.host}:{args.port or 'auto'}...", file=out)
    print(f"Port will be written to: {port_file}", file=out)
    print("\nEndpoints:", file=out)
    print("  GET    /                     - Landing page", file=out)
    print("  POST   /render               - Render posted Markdown", file=out)
    print("  GET    /view?url=<url>       - Render a Gist or raw URL", file=out)
    print("  GET    /local?file=<path>    - Render a local file", file=out)
    print("\nPress Ctrl+C to stop the server", file=out)
    print("=" * 60, file=out)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)
    if args.verbose:
        logging.basicConfig(stream=sys.stderr, level=logging.DEBUG)
    out = sys.stdout
    port_file = args.port_file or get_discovery_file_path()
    _print_banner(args, port_file, out=out)

    def open_initial_view(port: int) -> None:
        if browser_suppressed(args):
            return
        webbrowser.open(f"http://localhost:{port}{initial_view_path(args.target)}")

    try:
        server = PreviewServer(port=args.port, host=args.host, port_file=port_file)
        server.start(on_ready=open_initial_view)
    except KeyboardInterrupt:
        print("\n\n✓ Server stopped by user", file=out)
        sys.exit(0)
    except Exception as e:
        print(f"\n✗ Error starting server: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
