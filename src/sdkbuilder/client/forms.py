"""Binary file values and form-like payloads.

:class:`FileUpload` marks a value that must travel as a file part of a
multipart body. :class:`FormData` is the form-like payload: an ordered list
of named text and file fields together with the form's encoding type, so a
caller can hand over a whole form and let the encoder decide between a JSON
body and a multipart body.
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator
from typing import IO, Any, Optional, Union

MULTIPART_ENCTYPE = "multipart/form-data"
URLENCODED_ENCTYPE = "application/x-www-form-urlencoded"


class FileUpload:
    """A file value inside a payload.

    Args:
        filename: Name reported in the multipart ``Content-Disposition``.
        content: Raw bytes or a binary file object.
        content_type: MIME type of the part; ``None`` lets httpx guess it
            from the filename.

    Example::

        avatar = FileUpload("me.png", Path("me.png").read_bytes(), "image/png")
        await api.fetch.users.upload_avatar({"$params": {"id": 2}, "file": avatar})
    """

    def __init__(
        self,
        filename: str,
        content: Union[bytes, IO[bytes]],
        content_type: Optional[str] = None,
    ) -> None:
        self.filename = filename
        self.content = content
        self.content_type = content_type

    @property
    def is_empty(self) -> bool:
        if isinstance(self.content, (bytes, bytearray)):
            return len(self.content) == 0
        return False

    def as_httpx_file(self) -> tuple[Any, ...]:
        """Return the ``(filename, content[, content_type])`` tuple httpx expects."""
        if self.content_type:
            return (self.filename, self.content, self.content_type)
        return (self.filename, self.content)

    def __repr__(self) -> str:
        return f"FileUpload(filename={self.filename!r}, content_type={self.content_type!r})"


def is_file_value(value: Any) -> bool:
    """Return ``True`` if *value* must be sent as a file part.

    :class:`FileUpload` instances and binary file objects qualify; text
    streams do not.
    """
    if isinstance(value, FileUpload):
        return True
    return isinstance(value, (io.BufferedIOBase, io.RawIOBase))


def as_file_upload(value: Any) -> FileUpload:
    """Wrap a binary file object in a :class:`FileUpload` (no-op for uploads)."""
    if isinstance(value, FileUpload):
        return value
    name = getattr(value, "name", None)
    filename = name.rsplit("/", 1)[-1] if isinstance(name, str) else "upload"
    return FileUpload(filename, value)


FieldValue = Union[str, FileUpload]


class FormData:
    """An ordered collection of form fields, with repeated names allowed.

    Args:
        fields: Initial ``(name, value)`` pairs. Values are strings or
            :class:`FileUpload` instances; anything else is converted with
            ``str()``.
        enctype: The form's encoding type. ``multipart/form-data`` forces a
            multipart body even when no file is attached.

    Example::

        form = FormData([("name", "Ann"), ("tag", "a"), ("tag", "b")])
        await api.fetch.users.create(form)  # JSON: {"name": "Ann", "tag": ["a", "b"]}
    """

    def __init__(
        self,
        fields: Optional[Iterable[tuple[str, Any]]] = None,
        enctype: str = URLENCODED_ENCTYPE,
    ) -> None:
        self.enctype = enctype
        self._fields: list[tuple[str, FieldValue]] = []
        for name, value in fields or ():
            self.append(name, value)

    def append(self, name: str, value: Any) -> None:
        if is_file_value(value):
            self._fields.append((name, as_file_upload(value)))
        else:
            self._fields.append((name, str(value)))

    def __iter__(self) -> Iterator[tuple[str, FieldValue]]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FormData({self._fields!r}, enctype={self.enctype!r})"

    @property
    def is_multipart(self) -> bool:
        """Whether the form declares multipart encoding or carries a selected file."""
        if self.enctype.lower() == MULTIPART_ENCTYPE:
            return True
        return any(
            isinstance(value, FileUpload) and not value.is_empty
            for _, value in self._fields
        )

    def to_dict(self) -> dict[str, Any]:
        """Flatten the fields into a dict; repeated names collapse into a list.

        File fields are rendered by filename since they cannot be JSON-encoded.
        """
        result: dict[str, Any] = {}
        for name, value in self._fields:
            item: Any = value.filename if isinstance(value, FileUpload) else value
            if name in result:
                existing = result[name]
                if not isinstance(existing, list):
                    result[name] = existing = [existing]
                existing.append(item)
            else:
                result[name] = item
        return result
