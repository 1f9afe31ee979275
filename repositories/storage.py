"""
Key-value storage surfaces.

A storage surface is the raw persistence the pipeline sits on: string keys,
string (JSON) values, nothing else. Surfaces are allowed to fail; callers
never use them directly but go through BoundedLocalStore, which contains
every failure.

Implementations:
- MemoryStorage: process-local dict (the default; mirrors browser storage)
- JsonFileStorage: a single JSON object file on disk
- SupabaseStorage: one row per key in a Supabase table
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageSurface(Protocol):
    """Minimal key-value persistence contract (localStorage-shaped)."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """Dict-backed surface. Contents live as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage:
    """
    Surface persisted as one JSON object file ({key: value, ...}).

    Writes go to a temporary file first and are then renamed over the target,
    so a crash mid-write leaves the previous contents intact. A missing file is
    an empty store; an unreadable one raises, and BoundedLocalStore treats
    that as "storage unavailable".
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not contain a JSON object")
        return data

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        temp_path.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if key in data:
                del data[key]
                self._save(data)


class SupabaseStorage:
    """
    Surface backed by a Supabase table with `key` (primary key) and `value`
    text columns.

    Errors reported by Supabase are raised as RuntimeError.
    """

    def __init__(self, table: str = "pipeline_store", client: Any = None) -> None:
        self.table = table
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            from repositories.client import get_supabase

            self._client = get_supabase()
        return self._client

    def get_item(self, key: str) -> Optional[str]:
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to read storage key {key!r}: {error}")

        rows = getattr(response, "data", None) or []
        if not rows:
            return None
        value = rows[0].get("value")
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        response = (
            self.client.table(self.table)
            .upsert({"key": key, "value": value})
            .execute()
        )
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to write storage key {key!r}: {error}")

    def remove_item(self, key: str) -> None:
        response = self.client.table(self.table).delete().eq("key", key).execute()
        error = getattr(response, "error", None)
        if error:
            raise RuntimeError(f"Failed to delete storage key {key!r}: {error}")


__all__ = [
    "JsonFileStorage",
    "MemoryStorage",
    "StorageSurface",
    "SupabaseStorage",
]
