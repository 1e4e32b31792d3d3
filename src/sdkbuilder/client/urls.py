"""Join the base URL with an endpoint path template and fill in placeholders.

Path templates use ``:name`` placeholders (``/users/:id/posts/:post_id``).
Substitution is permissive: placeholders with no matching
value are left in the path as literal text.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from sdkbuilder.models import PathParams

PLACEHOLDER_RE = re.compile(r":\w+")

# Left unescaped inside a path segment, besides ASCII letters and digits.
_UNRESERVED = "-_.!~*'()"


def stringify(value: Any) -> str:
    """Render a scalar the way it should appear in a URL or form field."""
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def encode_component(value: Any) -> str:
    """Percent-encode *value* for use inside a single path segment."""
    return quote(stringify(value), safe=_UNRESERVED)


def join_path(base_path: str, template: str) -> str:
    """Join two path pieces with exactly one separating slash."""
    return f"{base_path.rstrip('/')}/{template.lstrip('/')}"


def substitute(path: str, path_params: PathParams) -> str:
    """Replace ``:name`` placeholders in *path*.

    * A scalar replaces the first placeholder, whatever its name.
    * A mapping replaces every ``:key`` occurrence for each of its keys;
      ``None`` values become the empty string.
    """
    if path_params is None:
        return path
    if isinstance(path_params, Mapping):
        for key, value in path_params.items():
            pattern = re.compile(re.escape(f":{key}") + r"(?!\w)")
            encoded = encode_component(value)
            path = pattern.sub(lambda _m: encoded, path)
        return path
    encoded = encode_component(path_params)
    return PLACEHOLDER_RE.sub(lambda _m: encoded, path, count=1)


def build_url(base_url: httpx.URL, template: str, path_params: PathParams = None) -> httpx.URL:
    """Build the request URL for one call.

    Args:
        base_url: The client's absolute base URL. Its query string, if any,
            is kept.
        template: The endpoint's path template.
        path_params: Scalar or mapping path parameters, or ``None``.

    Returns:
        The absolute request URL.

    Example::

        >>> str(build_url(httpx.URL("http://h/api"), "/users/:id", 2))
        'http://h/api/users/2'
    """
    path = substitute(join_path(base_url.path, template), path_params)
    origin = f"{base_url.scheme}://{base_url.netloc.decode('ascii')}"
    url = httpx.URL(origin + path)
    if base_url.query:
        url = url.copy_with(query=base_url.query)
    return url
