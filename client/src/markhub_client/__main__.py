#!/usr/bin/env python3
"""Open a Markdown file or URL in MarkHub.

Reuses the running preview server when its advertised port answers, and
starts one in the background otherwise.
"""

import argparse
import logging
import sys
import webbrowser
from pathlib import Path

from .discovery import DiscoveryService
from .exceptions import DiscoveryError
from .preview import build_embed_page, is_remote_target, view_url
from .server_failure import exit_with_discovery_failure


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Preview Markdown with GitHub styling"
    )
    parser.add_argument("target", help="Markdown file, Gist URL or raw Markdown URL")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--embed",
        action="store_true",
        help="Print an HTML page that frames the preview, for editor panes",
    )
    mode.add_argument(
        "--print-url",
        action="store_true",
        help="Print the preview URL instead of opening a browser",
    )
    parser.add_argument(
        "--port-file",
        type=Path,
        default=None,
        help="Port discovery file (default: ~/.markhub/port)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    target = args.target
    if not is_remote_target(target) and not Path(target).expanduser().is_file():
        print(f"Error: File not found: {target}", file=sys.stderr)
        return 1

    service = DiscoveryService(port_file=args.port_file)
    try:
        handle = service.ensure_running_sync()
    except DiscoveryError as exc:
        exit_with_discovery_failure(str(exc), service.port_file, exc)

    url = view_url(handle, target, embed=args.embed)
    if args.embed:
        print(build_embed_page(url, title=f"Preview: {Path(target).name}"))
    elif args.print_url:
        print(url)
    else:
        webbrowser.open(url)
        print(f"Opened {url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
