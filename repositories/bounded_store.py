"""
Bounded Local Store.

The only component allowed to touch a storage surface. Values are JSON-encoded;
sequences appended through `append` keep at most `capacity` entries, evicting
the oldest first.

Failure containment:
- Reads never raise. A missing key, an unavailable surface, corrupt JSON or a
  value of the wrong shape all yield the caller's fallback.
- Writes never raise. They report the outcome as a StoreResult so callers (and
  tests) can see the failure path.

Consistency:
- Within one store instance, writes are serialized by a lock, so concurrent
  appends from threads in the same process do not lose items.
- There is no locking across processes. Two processes sharing one surface
  (two API workers on the same file or Supabase table) can interleave their
  read-modify-write cycles; the last writer wins and the other append is lost.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from numbers import Number
from typing import Any, List, Optional, TypeVar

from repositories.storage import MemoryStorage, StorageSurface

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class StoreResult:
    """
    Outcome of a write.

    ok: True when the value reached the storage surface
    error: Description of the failure (None when ok)
    """

    ok: bool
    error: Optional[str] = None


def _same_shape(value: Any, fallback: Any) -> bool:
    if fallback is None:
        return True
    if isinstance(fallback, list):
        return isinstance(value, list)
    if isinstance(fallback, dict):
        return isinstance(value, dict)
    if isinstance(fallback, str):
        return isinstance(value, str)
    if isinstance(fallback, Number) and not isinstance(fallback, bool):
        return isinstance(value, Number) and not isinstance(value, bool)
    return isinstance(value, type(fallback))


class BoundedLocalStore:
    """
    Capacity-limited JSON store over a key-value surface.

    Example:
        store = BoundedLocalStore(MemoryStorage())
        store.append("funnelEvents_v1", {"event": "session_start"}, capacity=600)
        store.read("funnelEvents_v1", [])
        # [{'event': 'session_start'}]
    """

    def __init__(self, surface: Optional[StorageSurface] = None) -> None:
        self.surface = surface
        self._lock = threading.RLock()

    def read(self, key: str, fallback: T) -> T:
        """Return the decoded value for key, or fallback on any problem."""

        if self.surface is None:
            return fallback
        try:
            raw = self.surface.get_item(key)
        except Exception as e:
            logger.warning(
                "Storage read failed; using fallback",
                extra={"storage_key": key, "error": str(e)},
            )
            return fallback

        if not raw:
            return fallback

        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(
                "Stored value is not valid JSON; using fallback",
                extra={"storage_key": key, "error": str(e)},
            )
            return fallback

        if not _same_shape(value, fallback):
            logger.warning(
                "Stored value has unexpected shape; using fallback",
                extra={"storage_key": key, "stored_type": type(value).__name__},
            )
            return fallback
        return value

    def read_sequence(self, key: str) -> List[Any]:
        return self.read(key, [])

    def write(self, key: str, value: Any) -> StoreResult:
        """JSON-encode value and store it under key."""

        if self.surface is None:
            return StoreResult(ok=False, error="storage unavailable")
        try:
            encoded = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.warning(
                "Value is not JSON serializable; write skipped",
                extra={"storage_key": key, "error": str(e)},
            )
            return StoreResult(ok=False, error=f"not serializable: {e}")

        with self._lock:
            try:
                self.surface.set_item(key, encoded)
            except Exception as e:
                logger.warning(
                    "Storage write failed; write skipped",
                    extra={"storage_key": key, "error": str(e)},
                )
                return StoreResult(ok=False, error=str(e))
        return StoreResult(ok=True)

    def append(self, key: str, item: Any, capacity: int) -> StoreResult:
        """
        Append item to the sequence under key, keeping the newest `capacity`.

        A stored value that is not a list is replaced by a fresh sequence.
        """

        if capacity < 1:
            raise ValueError("capacity must be >= 1")

        with self._lock:
            items = list(self.read_sequence(key))
            items.append(item)
            return self.write(key, items[-capacity:])

    def clear(self, key: str) -> StoreResult:
        """Reset key to an empty sequence."""

        return self.write(key, [])


def memory_store() -> BoundedLocalStore:
    return BoundedLocalStore(MemoryStorage())


__all__ = ["BoundedLocalStore", "StoreResult", "memory_store"]
