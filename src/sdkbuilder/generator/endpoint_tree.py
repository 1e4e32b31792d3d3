"""Validate an endpoint tree and mirror it into a tree of callables.

This is the structural half of sdkbuilder. It runs once, at client
construction, in two passes:

1. :func:`validate_endpoint_tree` walks the raw nested mapping and decides,
   for every node, whether it is an endpoint (a mapping with string
   ``path`` and ``method``), a group (any other mapping), or invalid
   (anything else). The result is a typed
   :class:`~sdkbuilder.models.EndpointGroup` plus a list of
   :class:`~sdkbuilder.models.StructuralIssue` records. Invalid nodes are
   dropped, never fatal.
2. :func:`build_client_tree` mirrors the validated tree into
   :class:`EndpointNamespace` objects, asking a factory for one request
   function per endpoint.

Example::

    validation = validate_endpoint_tree({
        "users": {
            "getAll": {"path": "/users", "method": "GET"},
            "getById": {"path": "/users/:id", "method": "GET"},
        },
    })
    client = build_client_tree(validation.tree, make_function)
    client.users.getById   # -> whatever make_function returned
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from sdkbuilder.exceptions import EndpointNotFoundError
from sdkbuilder.models import (
    EndpointDefinition,
    EndpointGroup,
    HTTPMethod,
    StructuralIssue,
    TreeValidation,
)

logger = logging.getLogger(__name__)

_LEAF_KEYS = frozenset({"path", "method"})

LeafFactory = Callable[[EndpointDefinition, str], Any]


# ---------------------------------------------------------------------------
# Validation pass
# ---------------------------------------------------------------------------


def validate_endpoint_tree(raw: Mapping[str, Any]) -> TreeValidation:
    """Classify every node of *raw* and return the typed tree.

    Each issue is also logged at WARNING level on this module's logger.

    Args:
        raw: The endpoint tree as supplied by the caller. Leaves may be
            plain mappings or :class:`~sdkbuilder.models.EndpointDefinition`
            instances.

    Returns:
        A :class:`~sdkbuilder.models.TreeValidation`.
    """
    issues: list[StructuralIssue] = []
    tree = _validate_group(raw, "", issues)
    for issue in issues:
        logger.warning("Invalid configuration for endpoint key %s: %s", issue.path, issue.message)
    return TreeValidation(tree=tree, issues=issues)


def is_endpoint_node(node: Any) -> bool:
    """Return ``True`` if *node* is shaped like an endpoint definition.

    A mapping that has string ``path`` and ``method`` entries counts as an
    endpoint even if it also holds other keys.
    """
    if isinstance(node, EndpointDefinition):
        return True
    return (
        isinstance(node, Mapping)
        and isinstance(node.get("path"), str)
        and isinstance(node.get("method"), str)
    )


def _validate_group(
    node: Mapping[str, Any],
    prefix: str,
    issues: list[StructuralIssue],
) -> EndpointGroup:
    children: dict[str, Any] = {}
    for key, value in node.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, EndpointDefinition):
            children[key] = value
        elif is_endpoint_node(value):
            definition = _validate_leaf(value, dotted, issues)
            if definition is not None:
                children[key] = definition
        elif isinstance(value, Mapping):
            children[key] = _validate_group(value, dotted, issues)
        else:
            issues.append(
                StructuralIssue(
                    path=dotted,
                    message=(
                        "Expected an endpoint definition or a group, "
                        f"got {type(value).__name__}"
                    ),
                )
            )
    return EndpointGroup(children)


def _validate_leaf(
    node: Mapping[str, Any],
    dotted: str,
    issues: list[StructuralIssue],
) -> EndpointDefinition | None:
    try:
        definition = EndpointDefinition(path=node["path"], method=node["method"])
    except PydanticValidationError:
        allowed = ", ".join(m.value for m in HTTPMethod)
        issues.append(
            StructuralIssue(
                path=dotted,
                message=f"Unsupported HTTP method {node['method']!r} (expected one of {allowed})",
            )
        )
        return None

    extra = sorted(str(k) for k in node if k not in _LEAF_KEYS)
    if extra:
        issues.append(
            StructuralIssue(
                path=dotted,
                message=(
                    "Ambiguous node treated as an endpoint; extra keys ignored: "
                    + ", ".join(extra)
                ),
            )
        )
    return definition


# ---------------------------------------------------------------------------
# Mirror pass
# ---------------------------------------------------------------------------


class EndpointNamespace:
    """Read-only node of a generated client.

    Children are reachable both as attributes (``api.fetch.users.getAll``)
    and as items (``api.fetch["users"]["getAll"]``). Assigning or deleting
    attributes raises :class:`AttributeError`: the structure is fixed once
    the client is built.

    Helpers that would otherwise collide with endpoint names live at module
    level: see :func:`walk_endpoints` and :func:`resolve_endpoint`.
    """

    def __init__(self, children: Mapping[str, Any], name: str = "") -> None:
        object.__setattr__(self, "_children", MappingProxyType(dict(children)))
        object.__setattr__(self, "_name", name)

    def __getattr__(self, item: str) -> Any:
        children = self.__dict__.get("_children")
        if children is None or item.startswith("__"):
            raise AttributeError(item)
        try:
            return children[item]
        except KeyError:
            where = self.__dict__.get("_name") or "client"
            raise AttributeError(f"'{where}' has no endpoint or group named '{item}'") from None

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("Generated clients are read-only")

    def __delattr__(self, key: str) -> None:
        raise AttributeError("Generated clients are read-only")

    def __getitem__(self, key: str) -> Any:
        return self._children[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __contains__(self, key: object) -> bool:
        return key in self._children

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | {str(k) for k in self._children})

    def __repr__(self) -> str:
        label = self._name or "client"
        return f"<EndpointNamespace {label}: {', '.join(map(str, self._children))}>"


def build_client_tree(
    tree: EndpointGroup,
    factory: LeafFactory,
    prefix: str = "",
) -> EndpointNamespace:
    """Mirror a validated tree, replacing each endpoint with ``factory(definition, name)``.

    Args:
        tree: A validated :class:`~sdkbuilder.models.EndpointGroup`.
        factory: Called once per endpoint with its definition and dotted
            name (``"users.getById"``); its return value becomes the leaf.
        prefix: Dotted name of *tree* itself; empty for the root.

    Returns:
        An :class:`EndpointNamespace` with the same keys and nesting.
    """
    children: dict[str, Any] = {}
    for key, node in tree.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(node, EndpointGroup):
            children[key] = build_client_tree(node, factory, dotted)
        else:
            children[key] = factory(node, dotted)
    return EndpointNamespace(children, prefix)


def walk_endpoints(namespace: EndpointNamespace, prefix: str = "") -> Iterator[tuple[str, Any]]:
    """Yield ``(dotted_name, function)`` for every endpoint, depth first."""
    for key in namespace:
        node = namespace[key]
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(node, EndpointNamespace):
            yield from walk_endpoints(node, dotted)
        else:
            yield dotted, node


def resolve_endpoint(namespace: EndpointNamespace, dotted_name: str) -> Any:
    """Look up an endpoint function by dotted name (``"users.getById"``).

    Raises:
        EndpointNotFoundError: If any segment is missing or the name stops
            at a group instead of an endpoint.
    """
    node: Any = namespace
    for segment in dotted_name.split("."):
        if not isinstance(node, EndpointNamespace) or segment not in node:
            raise EndpointNotFoundError(f"No endpoint named '{dotted_name}'")
        node = node[segment]
    if isinstance(node, EndpointNamespace):
        raise EndpointNotFoundError(f"'{dotted_name}' is a group, not an endpoint")
    return node
