"""Small persisted key-value store (JSON file) with file locking.

Holds the client-side state the page keeps between runs, one file per
browser session:
  userId      opaque identifier of the signed-in user
  hackathons  serialized recommendation list handed to the detail view
"""
from __future__ import annotations

import fcntl
import json
import re
from pathlib import Path
from typing import Any

from hackathon_recs.log import get_logger
from hackathon_recs.models import RecommendationRecord

log = get_logger(__name__)

USER_ID_KEY = "userId"
HACKATHONS_KEY = "hackathons"

_CLIENT_ID_RE = re.compile(r"[A-Za-z0-9_-]{1,64}")


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class LocalStore:
    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            _lock(f, exclusive=False)
            try:
                text = f.read()
            finally:
                _unlock(f)
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("Local store %s is corrupt (%s) — starting empty", self.path.name, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            _lock(f)
            try:
                json.dump(data, f, ensure_ascii=False)
            finally:
                _unlock(f)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        log.debug("Stored %s", key)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def user_id(self) -> str | None:
        value = self.get(USER_ID_KEY)
        if value is None:
            return None
        value = str(value).strip()
        return value or None


def save_for_detail(store: LocalStore, records: list[RecommendationRecord], index: int) -> int:
    """Hand the current list to the detail view; returns the index to open."""
    store.set(HACKATHONS_KEY, [r.to_dict() for r in records])
    return index


def load_for_detail(store: LocalStore, index: int) -> RecommendationRecord | None:
    items = store.get(HACKATHONS_KEY) or []
    if not isinstance(items, list) or not 0 <= index < len(items):
        return None
    item = items[index]
    return RecommendationRecord.from_dict(item) if isinstance(item, dict) else None


def store_for_client(directory: Path, client_id: str) -> LocalStore:
    """Store owned by one browser session; ``client_id`` names its file."""
    if not isinstance(client_id, str) or not _CLIENT_ID_RE.fullmatch(client_id):
        raise ValueError(f"Invalid client id: {client_id!r}")
    return LocalStore(directory / f"{client_id}.json")
