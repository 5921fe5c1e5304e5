"""MarkHub client: find or start a preview server and open documents in it."""

__version__ = "0.1.0"
__all__ = [
    "DiscoveryError",
    "DiscoveryService",
    "ProcessLauncher",
    "ServerHandle",
    "ServerSpawnError",
    "ServerStartTimeoutError",
    "SubprocessLauncher",
    "build_embed_page",
    "embed_preview",
    "is_server_running",
    "open_preview",
    "retry_until",
    "view_url",
]

from .discovery import DiscoveryService, ServerHandle
from .exceptions import DiscoveryError, ServerSpawnError, ServerStartTimeoutError
from .launcher import ProcessLauncher, SubprocessLauncher
from .preview import build_embed_page, embed_preview, open_preview, view_url
from .probe import is_server_running
from .retry import retry_until
