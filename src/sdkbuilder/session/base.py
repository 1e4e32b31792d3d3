"""Abstract base class for session stores.

A session store is the persistent key-value capability a
:class:`~sdkbuilder.builder.SDKBuilder` reads its bearer token from. It is
injected at construction, so several clients can hold isolated sessions and
tests can use a throwaway in-memory store.

To implement a new backend, subclass :class:`SessionStore` and implement the
four operations. ``snapshot`` may also be a coroutine function; the
dispatcher awaits it when needed.

See Also:
    :class:`~sdkbuilder.session.memory.MemorySessionStore`
    :class:`~sdkbuilder.session.file_store.FileSessionStore`
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, Optional

TOKEN_KEYS = ("token", "access_token")
"""Snapshot keys checked, in order, for a bearer token."""


class SessionStore(ABC):
    """Persistent key-value storage for session data such as access tokens."""

    @abstractmethod
    def snapshot(self) -> dict[str, Any]:
        """Return a fresh copy of every stored entry."""
        ...

    @abstractmethod
    def store(self, entries: Mapping[str, Any]) -> None:
        """Upsert entries; an entry whose value is ``None`` is deleted instead."""
        ...

    @abstractmethod
    def dispose(self, keys: Iterable[str]) -> None:
        """Delete the named entries. Missing keys are ignored."""
        ...

    @abstractmethod
    def clear_all(self) -> None:
        """Delete every entry."""
        ...


def find_token(snapshot: Optional[Mapping[str, Any]]) -> Optional[str]:
    """Return the bearer token held in *snapshot*, if any.

    The first truthy value among :data:`TOKEN_KEYS` is taken. It is only
    used when it is a string, so ``{"token": 123, "access_token": "a"}``
    yields no token at all.
    """
    if not snapshot:
        return None
    value = next((snapshot[key] for key in TOKEN_KEYS if snapshot.get(key)), None)
    return value if isinstance(value, str) else None
