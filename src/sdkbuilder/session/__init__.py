"""Session stores: where a client finds its bearer token.

Classes:
    :class:`SessionStore` -- abstract interface injected into
    :class:`~sdkbuilder.builder.SDKBuilder`.
    :class:`MemorySessionStore` -- process-local, the default.
    :class:`FileSessionStore` -- JSON file under the XDG data directory.
"""

from sdkbuilder.session.base import TOKEN_KEYS, SessionStore, find_token
from sdkbuilder.session.file_store import FileSessionStore
from sdkbuilder.session.memory import MemorySessionStore

__all__ = [
    "SessionStore",
    "MemorySessionStore",
    "FileSessionStore",
    "TOKEN_KEYS",
    "find_token",
]
