"""In-memory session store, the default for a new client."""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from sdkbuilder.session.base import SessionStore


class MemorySessionStore(SessionStore):
    """Keep session entries in a dict for the lifetime of the process.

    Snapshots are deep copies, so a caller mutating a snapshot never changes
    what the next request sees.

    Args:
        initial: Entries to start with. ``None`` values are skipped.

    Example::

        store = MemorySessionStore({"token": "abc"})
        api = SDKBuilder(base="https://api.example.com", endpoints=..., session_store=store)
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._entries: dict[str, Any] = {}
        self._lock = threading.Lock()
        if initial:
            self.store(initial)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._entries)

    def store(self, entries: Mapping[str, Any]) -> None:
        with self._lock:
            for key, value in entries.items():
                if value is None:
                    self._entries.pop(key, None)
                else:
                    self._entries[key] = copy.deepcopy(value)

    def dispose(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()
