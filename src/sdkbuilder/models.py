"""Canonical models shared across all sdkbuilder modules.

The models fall into three groups:

**Endpoint configuration** -- the declarative input and its validated form:
    :class:`HTTPMethod`, :class:`EndpointDefinition`, :class:`EndpointGroup`,
    :class:`StructuralIssue` and :class:`TreeValidation`.

**Client configuration** -- everything :class:`~sdkbuilder.builder.SDKBuilder`
needs at construction: :class:`ClientConfig`.

**Call results** -- :class:`ResponseEnvelope`, the uniform value every
generated request function resolves to.

Pydantic v2 is used for everything that is validated from user input. The
validated tree itself is a plain immutable mapping because its leaves and
groups are distinguished by type, not by a discriminator field.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

DEFAULT_TIMEOUT_MS = 30000
"""Deadline applied to each network call when none is configured."""


# --- Endpoint configuration ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods an endpoint definition may declare."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def sends_query(self) -> bool:
        """Whether the payload of this method travels in the query string."""
        return self in (HTTPMethod.GET, HTTPMethod.DELETE)


class EndpointDefinition(BaseModel):
    """A single endpoint: a ``:name``-style path template plus an HTTP method.

    Lower-case method names are accepted and normalised to upper case.

    Example::

        EndpointDefinition(path="/users/:id", method="get")
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Path template, e.g. '/users/:id'")
    method: HTTPMethod

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value


class EndpointGroup(Mapping[str, "EndpointNode"]):
    """Validated group node: an immutable, ordered mapping of child nodes.

    Children are either :class:`EndpointDefinition` leaves or nested
    ``EndpointGroup`` instances. Produced by
    :func:`~sdkbuilder.generator.endpoint_tree.validate_endpoint_tree`.
    """

    def __init__(self, children: Optional[Mapping[str, EndpointNode]] = None) -> None:
        self._children: dict[str, EndpointNode] = dict(children or {})

    def __getitem__(self, key: str) -> EndpointNode:
        return self._children[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"EndpointGroup({self._children!r})"

    def to_dict(self) -> dict[str, Any]:
        """Return a plain nested dict, leaves rendered as ``{"path", "method"}``."""
        result: dict[str, Any] = {}
        for name, node in self._children.items():
            if isinstance(node, EndpointGroup):
                result[name] = node.to_dict()
            else:
                result[name] = {"path": node.path, "method": node.method.value}
        return result


EndpointNode = Union[EndpointDefinition, EndpointGroup]

PathParams = Union[Mapping[str, Any], str, int, float, None]
"""Path-parameter source: a scalar for the first placeholder, or a mapping by name."""


class StructuralIssue(BaseModel):
    """A node that was skipped or reinterpreted while validating an endpoint tree."""

    path: str = Field(description="Dotted key path of the offending node")
    message: str
    severity: str = "warning"


@dataclass(frozen=True)
class TreeValidation:
    """Outcome of validating a raw endpoint tree.

    Attributes:
        tree: The typed tree, with every invalid branch omitted.
        issues: One entry per skipped or ambiguous node, in walk order.
    """

    tree: EndpointGroup
    issues: list[StructuralIssue] = field(default_factory=list)

    @property
    def is_clean(self) -> bool:
        return not self.issues


# --- Call results ---


class ResponseEnvelope(BaseModel):
    """Uniform result of every generated request function.

    ``success`` and ``ok`` are derived from ``status`` so they can never
    disagree with it. ``status == 0`` marks a client-side failure (network
    error or timeout); ``response`` then holds ``{"message", "error_details"}``.

    Example::

        envelope = await api.fetch.users.get_by_id(2)
        if envelope.success:
            print(envelope.response["name"])
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: int
    response: Any = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def success(self) -> bool:
        return 200 <= self.status <= 299

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        return self.success


# --- Client configuration ---


class ClientConfig(BaseModel):
    """Construction-time configuration for :class:`~sdkbuilder.builder.SDKBuilder`.

    ``base`` must be an absolute ``http``/``https`` URL. ``default_headers``
    always ends up with an ``Accept`` header; see
    :meth:`~sdkbuilder.builder.SDKBuilder.__init__`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    base: str = Field(description="Absolute base URL, e.g. 'https://api.example.com/v1'")
    endpoints: dict[str, Any] = Field(description="Raw endpoint tree")
    on_invalid_credential: Optional[Callable[[ResponseEnvelope], Any]] = Field(
        default=None,
        description="Called (and awaited if needed) whenever a call returns HTTP 401",
    )
    default_headers: dict[str, str] = Field(default_factory=dict)
    request_timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS, gt=0, description="Per-call network deadline"
    )

    @field_validator("base")
    @classmethod
    def _absolute_base(cls, value: str) -> str:
        try:
            url = httpx.URL(value)
        except httpx.InvalidURL as exc:
            raise ValueError(f"'base' is not a valid URL: {value!r}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"'base' must be an absolute http(s) URL, got {value!r}")
        return value
