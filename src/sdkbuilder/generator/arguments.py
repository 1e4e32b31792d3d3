"""Resolve the positional arguments of a generated request function.

Generated functions accept up to two positional inputs so that one function
covers three calling styles without separate names::

    await api.fetch.users.get_by_id(2)                               # id only
    await api.fetch.users.update({"$params": {"id": 2}, "name": "x"})  # one bag
    await api.fetch.users.update({"id": 2}, {"name": "x"})             # separately

:func:`resolve_call_arguments` performs that disambiguation and returns a
:class:`CallArguments` value. The explicit forms :func:`from_bag` and
:class:`CallArguments` itself let callers skip the shape inspection.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from sdkbuilder.client.forms import FormData
from sdkbuilder.exceptions import ValidationError
from sdkbuilder.models import PathParams

PARAMS_KEY = "$params"
"""Reserved bag key whose mapping value supplies the path parameters."""


@dataclass(frozen=True)
class CallArguments:
    """Path parameters and payload of a single call, already disambiguated.

    Attributes:
        path_params: A scalar (substituted into the first placeholder), a
            mapping of placeholder names to values, or ``None``.
        payload: Query parameters for GET/DELETE, the body otherwise.
    """

    path_params: PathParams = None
    payload: Any = None


def resolve_call_arguments(first: Any = None, second: Any = None) -> CallArguments:
    """Decide which of *first* and *second* are path parameters and payload.

    1. *second* given: *first* holds the path parameters, *second* the payload.
    2. *first* is a mapping: it is a combined bag, see :func:`from_bag`.
    3. *first* is a :class:`FormData`: it is the payload. This is checked
       before the scalar rule below, which would otherwise take the form as
       the path parameter source.
    4. Otherwise *first* (scalar or ``None``) holds the path parameters and
       there is no payload.

    Raises:
        ValidationError: If a ``$params`` value is a mapping or a sequence.
    """
    if second is not None:
        return CallArguments(path_params=first, payload=second)
    if isinstance(first, FormData):
        return CallArguments(payload=first)
    if isinstance(first, Mapping):
        return from_bag(first)
    return CallArguments(path_params=first)


def from_bag(bag: Mapping[str, Any]) -> CallArguments:
    """Split a combined bag into path parameters and payload.

    The ``$params`` entry, when its value is a mapping, becomes the path
    parameters and is left out of the payload. *bag* itself is not modified.

    Raises:
        ValidationError: If a ``$params`` value is a mapping or a sequence.
    """
    payload = dict(bag)
    params = payload.get(PARAMS_KEY)
    path_params: Optional[Mapping[str, Any]] = None
    if isinstance(params, Mapping):
        _check_scalar_params(params)
        path_params = params
        del payload[PARAMS_KEY]
    return CallArguments(path_params=path_params, payload=payload)


def _check_scalar_params(params: Mapping[str, Any]) -> None:
    for key, value in params.items():
        if isinstance(value, (Mapping, list, tuple, set, frozenset)):
            raise ValidationError(
                f"Path parameter '{key}' in {PARAMS_KEY} must be a scalar. "
                f"Received: {value!r}"
            )
