"""Remote synchronization for MyHub."""

from .registry import RemoteRegistry
from .sync import RemoteSyncBridge, SyncResult
from .transport import GitTransport, Transport

__all__ = [
    "GitTransport",
    "RemoteRegistry",
    "RemoteSyncBridge",
    "SyncResult",
    "Transport",
]
