"""Session store persisted as a JSON file.

Entries live in ``~/.local/share/sdkbuilder/sessions/<name>.json`` (XDG) or
the platform-equivalent directory. Every write goes through
:func:`~sdkbuilder.config.atomic_write` with ``0o600`` permissions so that
tokens are never world-readable, even momentarily.

The file is re-read on every :meth:`FileSessionStore.snapshot`, so a token
written by another process (for example ``sdkbuilder session set``) is
picked up by the next request without restarting anything.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Optional

from sdkbuilder.config import atomic_write, get_sessions_dir
from sdkbuilder.session.base import SessionStore

DEFAULT_SESSION_NAME = "default"


class FileSessionStore(SessionStore):
    """Read/write session entries in a single JSON file.

    Args:
        name: Session name; the file is ``<sessions_dir>/<name>.json``.
            Ignored when *path* is given.
        path: Explicit file location.

    Example::

        store = FileSessionStore("my-api")
        store.store({"token": "tok123"})
        assert store.snapshot()["token"] == "tok123"
    """

    def __init__(self, name: str = DEFAULT_SESSION_NAME, path: Optional[Path] = None) -> None:
        self._name = name
        self._path = path if path is not None else get_sessions_dir() / f"{name}.json"

    @property
    def path(self) -> Path:
        """The filesystem path to this session's file."""
        return self._path

    def snapshot(self) -> dict[str, Any]:
        """Return every stored entry.

        Returns an empty dict if the file does not exist or cannot be parsed.
        Values come back with the JSON types they were stored with.
        """
        return self._read()

    def store(self, entries: Mapping[str, Any]) -> None:
        current = self._read()
        for key, value in entries.items():
            if value is None:
                current.pop(key, None)
            else:
                current[key] = value
        self._write(current)

    def dispose(self, keys: Iterable[str]) -> None:
        current = self._read()
        for key in keys:
            current.pop(key, None)
        self._write(current)

    def clear_all(self) -> None:
        """Delete the session file. A no-op when it does not exist."""
        if self._path.is_file():
            self._path.unlink()

    def _read(self) -> dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, entries: dict[str, Any]) -> None:
        text = json.dumps(entries, indent=2, default=str) + "\n"
        atomic_write(self._path, text, permissions=0o600)
