"""Named remotes and their sync state.

Remotes are a plain name -> url mapping in ``.myhub/remotes.json``.
Successful pushes and pulls are recorded per remote in ``.myhub/sync.json``.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any

from ..errors import RemoteNotFoundError
from ..utils.fs import safe_json_load, write_json


class RemoteRegistry:
    """Name -> url mapping for remotes."""

    def __init__(self, remotes_path: Path, sync_path: Path):
        self.remotes_path = Path(remotes_path)
        self.sync_path = Path(sync_path)

    def add(self, name: str, url: str) -> None:
        """Add or update a remote; the last write for a name wins."""
        remotes = self.all()
        remotes[name] = url
        write_json(self.remotes_path, remotes)

    def resolve(self, name: str) -> str:
        """Return the url of a remote.

        Raises:
            RemoteNotFoundError: If no remote has this name
        """
        url = self.all().get(name)
        if not url:
            raise RemoteNotFoundError(name)
        return url

    def all(self) -> dict[str, str]:
        data = safe_json_load(self.remotes_path, {})
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

    def sync_state(self, name: str) -> dict[str, Any]:
        data = safe_json_load(self.sync_path, {})
        state = data.get(name) if isinstance(data, dict) else None
        return state if isinstance(state, dict) else {}

    def mark_synced(self, name: str, direction: str, **details: Any) -> None:
        """Record a completed push or pull. Only called after success."""
        data = safe_json_load(self.sync_path, {})
        if not isinstance(data, dict):
            data = {}
        state = data.get(name) if isinstance(data.get(name), dict) else {}
        state[direction] = {"timestamp": datetime.now().isoformat(), **details}
        data[name] = state
        write_json(self.sync_path, data)
