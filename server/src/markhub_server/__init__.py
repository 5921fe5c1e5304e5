"""MarkHub preview server package."""

__version__ = "0.1.0"
__all__ = [
    "PageRenderer",
    "PortAdvertisement",
    "PreviewServer",
    "render_markdown",
]

from .port_discovery import PortAdvertisement
from .preview_server import PreviewServer
from .renderer import PageRenderer, render_markdown
