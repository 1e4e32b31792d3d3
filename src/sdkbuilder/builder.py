"""The :class:`SDKBuilder` facade and the generated request functions.

:class:`SDKBuilder` validates its configuration, builds the ``fetch`` tree
once, and wires every generated :class:`EndpointFunction` to the shared
request pipeline::

    arguments -> URL -> payload encoding -> dispatch -> envelope -> 401 hook

Example::

    api = SDKBuilder(
        base="https://api.example.com",
        endpoints={
            "users": {
                "getAll": {"path": "/users", "method": "GET"},
                "getById": {"path": "/users/:id", "method": "GET"},
                "create": {"path": "/users", "method": "POST"},
            },
        },
    )

    async with api:
        envelope = await api.fetch.users.getById(2)
        if envelope.success:
            print(envelope.response)
"""

from __future__ import annotations

import warnings
from collections.abc import Awaitable, Iterable, Mapping
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from sdkbuilder.client.dispatcher import RequestDispatcher
from sdkbuilder.client.encoding import encode_payload
from sdkbuilder.client.interceptor import (
    InvalidCredentialCallback,
    intercept_invalid_credential,
)
from sdkbuilder.client.urls import build_url
from sdkbuilder.exceptions import ConfigError, SDKBuilderError
from sdkbuilder.generator.arguments import CallArguments, from_bag, resolve_call_arguments
from sdkbuilder.generator.endpoint_tree import (
    EndpointNamespace,
    build_client_tree,
    validate_endpoint_tree,
)
from sdkbuilder.models import (
    DEFAULT_TIMEOUT_MS,
    ClientConfig,
    EndpointDefinition,
    PathParams,
    ResponseEnvelope,
    StructuralIssue,
)
from sdkbuilder.session.base import SessionStore
from sdkbuilder.session.memory import MemorySessionStore


class EndpointFunction:
    """A generated request function for one endpoint.

    Calling it returns an awaitable resolving to a
    :class:`~sdkbuilder.models.ResponseEnvelope`. Argument validation
    happens at call time, before anything is awaited, so a bad ``$params``
    value raises :class:`~sdkbuilder.exceptions.ValidationError`
    immediately.

    Three call forms are available:

    * ``fn(first, second)`` -- shape-inspecting, see
      :func:`~sdkbuilder.generator.arguments.resolve_call_arguments`;
    * ``fn.with_params(path_params, payload)`` -- explicit;
    * ``fn.with_bag(bag)`` -- a single bag with an optional ``$params`` key.
    """

    def __init__(self, owner: SDKBuilder, definition: EndpointDefinition, name: str) -> None:
        self._owner = owner
        self._definition = definition
        self._name = name

    @property
    def definition(self) -> EndpointDefinition:
        return self._definition

    @property
    def name(self) -> str:
        """Dotted name of this endpoint within the tree, e.g. ``users.getById``."""
        return self._name

    def __call__(self, first: Any = None, second: Any = None) -> Awaitable[ResponseEnvelope]:
        return self.call(resolve_call_arguments(first, second))

    def with_params(
        self, path_params: PathParams = None, payload: Any = None
    ) -> Awaitable[ResponseEnvelope]:
        return self.call(CallArguments(path_params=path_params, payload=payload))

    def with_bag(self, bag: Mapping[str, Any]) -> Awaitable[ResponseEnvelope]:
        return self.call(from_bag(bag))

    def call(self, arguments: CallArguments) -> Awaitable[ResponseEnvelope]:
        return self._owner._execute(self._definition, arguments, self._name)

    def __repr__(self) -> str:
        return (
            f"<EndpointFunction {self._name}: "
            f"{self._definition.method.value} {self._definition.path}>"
        )


class SDKBuilder:
    """Build a tree of async request functions from an endpoint tree.

    Args:
        base: Absolute base URL every endpoint path is joined to.
        endpoints: Nested mapping of names to endpoint definitions
            (``{"path": ..., "method": ...}``) and groups.
        on_invalid_credential: Called with the envelope whenever a call
            returns HTTP 401; awaited if it returns an awaitable. Its
            exceptions propagate to the caller.
        default_headers: Headers sent with every request.
            ``Accept: application/json`` is added when absent.
        request_timeout_ms: Deadline for each network call.
        session_store: Where the bearer token is read from. Defaults to a
            fresh :class:`~sdkbuilder.session.memory.MemorySessionStore`.
        transport: Optional httpx transport for the underlying client.

    Raises:
        ConfigError: If ``base`` is missing or not an absolute URL, or the
            configuration is otherwise invalid. Malformed endpoint branches
            are not errors; they are skipped and reported in :attr:`issues`.
    """

    def __init__(
        self,
        base: Optional[str],
        endpoints: Mapping[str, Any],
        on_invalid_credential: Optional[InvalidCredentialCallback] = None,
        default_headers: Optional[Mapping[str, str]] = None,
        request_timeout_ms: Optional[int] = DEFAULT_TIMEOUT_MS,
        session_store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not base:
            raise ConfigError("'base' URL configuration is required.")
        if not isinstance(endpoints, Mapping):
            raise ConfigError("'endpoints' configuration must be a mapping.")
        try:
            config = ClientConfig(
                base=base,
                endpoints=dict(endpoints),
                on_invalid_credential=on_invalid_credential,
                default_headers=dict(default_headers or {}),
                request_timeout_ms=request_timeout_ms or DEFAULT_TIMEOUT_MS,
            )
        except PydanticValidationError as exc:
            raise ConfigError(f"Invalid client configuration: {exc}") from exc

        self._config = config
        self._base_url = httpx.URL(config.base)
        self._on_invalid_credential = config.on_invalid_credential
        self._session_store = session_store if session_store is not None else MemorySessionStore()
        self._dispatcher = RequestDispatcher(
            default_headers=config.default_headers,
            session_store=self._session_store,
            timeout_ms=config.request_timeout_ms,
            transport=transport,
        )

        validation = validate_endpoint_tree(config.endpoints)
        self._issues = list(validation.issues)
        self._fetch = build_client_tree(validation.tree, self._make_function)

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        session_store: Optional[SessionStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> SDKBuilder:
        """Build a client from an already validated :class:`~sdkbuilder.models.ClientConfig`."""
        return cls(
            base=config.base,
            endpoints=config.endpoints,
            on_invalid_credential=config.on_invalid_credential,
            default_headers=config.default_headers,
            request_timeout_ms=config.request_timeout_ms,
            session_store=session_store,
            transport=transport,
        )

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    @property
    def fetch(self) -> EndpointNamespace:
        """The generated client: one request function per endpoint."""
        return self._fetch

    @property
    def issues(self) -> list[StructuralIssue]:
        """Structural problems found while validating the endpoint tree."""
        return list(self._issues)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request, ``Accept`` included."""
        return self._dispatcher.default_headers

    @property
    def session_store(self) -> SessionStore:
        return self._session_store

    # ------------------------------------------------------------------ #
    # Session operations
    # ------------------------------------------------------------------ #

    def store(self, entries: Mapping[str, Any]) -> None:
        """Upsert session entries; ``None`` values delete the entry."""
        self._session_store.store(entries)

    def dispose(self, keys: Iterable[str]) -> None:
        """Delete the named session entries."""
        self._session_store.dispose(list(keys))

    def clear_all_persistent_data(self) -> None:
        """Delete every session entry."""
        self._session_store.clear_all()

    async def session(self) -> dict[str, Any]:
        """Return a snapshot of the session store."""
        return await self._dispatcher.session_snapshot()

    def callback(self) -> None:
        """Deprecated. Await the generated functions instead."""
        warnings.warn(
            "SDKBuilder.callback() is deprecated; await the generated functions instead.",
            DeprecationWarning,
            stacklevel=2,
        )
        raise SDKBuilderError("The 'callback' method is deprecated.")

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def aclose(self) -> None:
        """Close the underlying HTTP client and its connection pool."""
        await self._dispatcher.aclose()

    async def __aenter__(self) -> SDKBuilder:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Request pipeline
    # ------------------------------------------------------------------ #

    def _make_function(self, definition: EndpointDefinition, name: str) -> EndpointFunction:
        return EndpointFunction(self, definition, name)

    async def _execute(
        self,
        definition: EndpointDefinition,
        arguments: CallArguments,
        name: str,
    ) -> ResponseEnvelope:
        url = build_url(self._base_url, definition.path, arguments.path_params)
        encoded = encode_payload(definition.method, url, arguments.payload)
        envelope = await self._dispatcher.dispatch(definition.method, encoded, name)
        return await intercept_invalid_credential(envelope, self._on_invalid_credential)
