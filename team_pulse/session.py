"""
Client-side session state.

The session remembers which team member the client acts as. Persistence is
delegated to a storage adapter handed in at construction time, so callers
decide where (if anywhere) the identity is kept.
"""

import json
from pathlib import Path
from typing import Protocol

CURRENT_USER_KEY = "currentUserId"


class SessionStorage(Protocol):
    """Key/value storage for session state."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """Storage that lives as long as the process."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStorage:
    """Storage backed by a small JSON object on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            values = json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            # Unreadable file, start over
            return {}
        return values if isinstance(values, dict) else {}

    def _save(self, values: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(values, indent=2), encoding="utf-8")

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self._save(values)

    def remove(self, key: str) -> None:
        values = self._load()
        if values.pop(key, None) is not None:
            self._save(values)


class ClientSession:
    """
    The team member a client is acting as.

    Args:
        storage: Where the selected identity is persisted
    """

    def __init__(self, storage: SessionStorage) -> None:
        self.storage = storage
        self._current_user_id = self._restore()

    def _restore(self) -> int | None:
        stored = self.storage.get(CURRENT_USER_KEY)
        if stored is None:
            return None
        try:
            return int(stored)
        except ValueError:
            # Unreadable value, start over
            self.storage.remove(CURRENT_USER_KEY)
            return None

    @property
    def current_user_id(self) -> int | None:
        return self._current_user_id

    def select(self, team_member_id: int) -> None:
        self._current_user_id = team_member_id
        self.storage.set(CURRENT_USER_KEY, str(team_member_id))

    def clear(self) -> None:
        self._current_user_id = None
        self.storage.remove(CURRENT_USER_KEY)
