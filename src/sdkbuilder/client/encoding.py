"""Turn a resolved payload into query parameters or a request body.

The encoding is chosen first by HTTP method, then by the payload's shape:

=================  ==========================================================
Method             Payload handling
=================  ==========================================================
GET, DELETE        Mapping entries (and :class:`FormData` text fields) become
                   query parameters; list values repeat the key; ``None`` is
                   skipped. Never a body.
POST, PUT, PATCH   :class:`FormData` -- multipart when it declares multipart
                   or carries a file, JSON otherwise.

                   Mapping -- multipart (bracketed keys) when any file value
                   occurs at any depth, compact JSON otherwise.

                   ``str`` -- sent verbatim; tagged JSON only if it parses.

                   ``bytes`` -- sent verbatim, untagged.
=================  ==========================================================

Multipart bodies leave ``Content-Type`` unset so httpx can add the boundary.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from sdkbuilder.client.forms import FileUpload, FormData, as_file_upload, is_file_value
from sdkbuilder.client.urls import stringify
from sdkbuilder.models import HTTPMethod

JSON_CONTENT_TYPE = "application/json"

_SEQUENCE_TYPES = (list, tuple)


@dataclass
class EncodedRequest:
    """The URL, body, and body-specific headers for a single request.

    At most one of ``content`` and ``files`` is set; both are empty for a
    request without a body.
    """

    url: httpx.URL
    content: Optional[bytes] = None
    files: list[tuple[str, tuple[Any, ...]]] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_multipart(self) -> bool:
        return bool(self.files)

    def send_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :meth:`httpx.AsyncClient.build_request`."""
        if self.content is not None:
            return {"content": self.content}
        if self.files:
            return {"files": self.files}
        return {}


def encode_payload(method: HTTPMethod, url: httpx.URL, payload: Any) -> EncodedRequest:
    """Encode *payload* for a request of *method* to *url*.

    Args:
        method: The endpoint's HTTP method.
        url: The request URL after path substitution.
        payload: The resolved payload (mapping, :class:`FormData`, ``str``,
            ``bytes``, or ``None``).

    Returns:
        An :class:`EncodedRequest`. ``None``, empty strings, and empty
        mappings never produce a body.
    """
    if _is_empty(payload):
        return EncodedRequest(url=url)

    if method.sends_query:
        return EncodedRequest(url=_append_query(url, payload))

    if isinstance(payload, FormData):
        return _encode_form(url, payload)
    if isinstance(payload, Mapping):
        if contains_file(payload):
            return _encode_multipart(url, payload)
        return EncodedRequest(
            url=url,
            content=dump_json(payload),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
    if isinstance(payload, str):
        return _encode_raw_text(url, payload)
    if isinstance(payload, (bytes, bytearray)):
        return EncodedRequest(url=url, content=bytes(payload))
    return EncodedRequest(url=url)


def dump_json(value: Any) -> bytes:
    """Compact JSON encoding (no whitespace after separators)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str).encode(
        "utf-8"
    )


def contains_file(value: Any) -> bool:
    """Return ``True`` if a file value occurs anywhere inside *value*."""
    if is_file_value(value):
        return True
    if isinstance(value, Mapping):
        return any(contains_file(item) for item in value.values())
    if isinstance(value, _SEQUENCE_TYPES):
        return any(contains_file(item) for item in value)
    return False


def flatten_multipart(
    value: Mapping[str, Any],
    parent_key: Optional[str] = None,
) -> list[tuple[str, Any]]:
    """Flatten a nested mapping into ``(key, value)`` multipart fields.

    Nested keys use bracket notation: ``{"user": {"tags": ["a"]}}`` becomes
    ``[("user[tags][0]", "a")]``. File values are kept as
    :class:`FileUpload`; scalars are stringified; ``None`` is dropped.
    """
    fields: list[tuple[str, Any]] = []
    for key, item in value.items():
        current = f"{parent_key}[{key}]" if parent_key else str(key)
        fields.extend(_flatten_item(current, item))
    return fields


def _flatten_item(key: str, item: Any) -> list[tuple[str, Any]]:
    if item is None:
        return []
    if is_file_value(item):
        return [(key, as_file_upload(item))]
    if isinstance(item, Mapping):
        return flatten_multipart(item, key)
    if isinstance(item, _SEQUENCE_TYPES):
        fields: list[tuple[str, Any]] = []
        for index, element in enumerate(item):
            fields.extend(_flatten_item(f"{key}[{index}]", element))
        return fields
    return [(key, stringify(item))]


def _is_empty(payload: Any) -> bool:
    if payload is None:
        return True
    if isinstance(payload, (str, bytes, bytearray, Mapping, FormData)):
        return len(payload) == 0
    return False


def _append_query(url: httpx.URL, payload: Any) -> httpx.URL:
    if isinstance(payload, FormData):
        pairs = [(name, value) for name, value in payload if isinstance(value, str)]
    elif isinstance(payload, Mapping):
        pairs = list(payload.items())
    else:
        return url

    params = url.params
    for key, value in pairs:
        if value is None:
            continue
        if isinstance(value, _SEQUENCE_TYPES):
            for element in value:
                if element is not None:
                    params = params.add(str(key), _query_value(element))
        else:
            params = params.add(str(key), _query_value(value))
    return url.copy_with(params=params)


def _query_value(value: Any) -> str:
    if isinstance(value, Mapping):
        return dump_json(value).decode("utf-8")
    return stringify(value)


def _encode_form(url: httpx.URL, form: FormData) -> EncodedRequest:
    if not form.is_multipart:
        return EncodedRequest(
            url=url,
            content=dump_json(form.to_dict()),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
    return _multipart_request(url, list(form))


def _encode_multipart(url: httpx.URL, payload: Mapping[str, Any]) -> EncodedRequest:
    return _multipart_request(url, flatten_multipart(payload))


def _multipart_request(url: httpx.URL, fields: list[tuple[str, Any]]) -> EncodedRequest:
    # Text fields go in as filename-less parts so field order is preserved and
    # httpx still produces multipart when the form carries no file at all.
    parts: list[tuple[str, tuple[Any, ...]]] = []
    for key, value in fields:
        if isinstance(value, FileUpload):
            parts.append((key, value.as_httpx_file()))
        else:
            parts.append((key, (None, value)))
    return EncodedRequest(url=url, files=parts)


def _encode_raw_text(url: httpx.URL, body: str) -> EncodedRequest:
    headers: dict[str, str] = {}
    try:
        json.loads(body)
    except ValueError:
        pass
    else:
        headers["Content-Type"] = JSON_CONTENT_TYPE
    return EncodedRequest(url=url, content=body.encode("utf-8"), headers=headers)
