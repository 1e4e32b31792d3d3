"""Send one encoded request and normalise the outcome.

:class:`RequestDispatcher` owns the shared :class:`httpx.AsyncClient` (and so
the connection pool and cookie jar) of one
:class:`~sdkbuilder.builder.SDKBuilder`. For every call it:

1. merges the default headers with the encoder's headers,
2. reads a fresh session snapshot and injects ``Authorization: Bearer``,
3. sends exactly one request under an overall deadline,
4. returns a :class:`~sdkbuilder.models.ResponseEnvelope`.

Transport failures and deadline expiry are returned as ``status == 0``
envelopes, never raised. There is no retry.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import Optional

import httpx

from sdkbuilder.client.encoding import EncodedRequest
from sdkbuilder.client.response import build_envelope, failure_envelope
from sdkbuilder.models import HTTPMethod, ResponseEnvelope
from sdkbuilder.session.base import SessionStore, find_token

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT = "application/json"

_TRANSPORT_ERRORS = (
    httpx.HTTPError,
    httpx.InvalidURL,
    httpx.StreamError,
    asyncio.TimeoutError,
    OSError,
)


def ensure_accept(headers: Optional[Mapping[str, str]]) -> dict[str, str]:
    """Return a copy of *headers* that is guaranteed to carry an ``Accept`` header."""
    merged = dict(headers or {})
    if not any(name.lower() == "accept" for name in merged):
        merged["Accept"] = DEFAULT_ACCEPT
    return merged


class RequestDispatcher:
    """Issue requests for a single client.

    Args:
        default_headers: Headers sent with every request. ``Accept:
            application/json`` is added when absent.
        session_store: Queried on every call for a ``token`` or
            ``access_token`` entry.
        timeout_ms: Overall deadline for one network call, in milliseconds.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    The underlying :class:`httpx.AsyncClient` is created on first use and
    released by :meth:`aclose`.
    """

    def __init__(
        self,
        default_headers: Optional[Mapping[str, str]],
        session_store: SessionStore,
        timeout_ms: int,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._default_headers = ensure_accept(default_headers)
        self._session_store = session_store
        self._timeout = timeout_ms / 1000
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def default_headers(self) -> dict[str, str]:
        return dict(self._default_headers)

    @property
    def timeout(self) -> float:
        """The per-call deadline in seconds."""
        return self._timeout

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def _get_client(self) -> httpx.AsyncClient:
        # Pooled connections are bound to the loop that opened them.
        loop = asyncio.get_running_loop()
        if self._client is not None and self._client_loop is not loop:
            logger.debug("Event loop changed, discarding the previous HTTP client")
            self._client = None
        if self._client is None or self._client.is_closed:
            self._client_loop = loop
            self._client = httpx.AsyncClient(
                transport=self._transport,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        client, loop = self._client, self._client_loop
        self._client = None
        self._client_loop = None
        # A client from a finished loop cannot be closed from this one.
        if client is not None and loop is asyncio.get_running_loop():
            await client.aclose()

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    async def session_snapshot(self) -> dict:
        """Read the session store; awaits stores whose ``snapshot`` is async."""
        snapshot = self._session_store.snapshot()
        if inspect.isawaitable(snapshot):
            snapshot = await snapshot
        return dict(snapshot or {})

    async def build_headers(self, request_headers: Mapping[str, str]) -> httpx.Headers:
        """Merge default and per-request headers, then inject the bearer token."""
        headers = httpx.Headers(self._default_headers)
        headers.update(request_headers)
        token = find_token(await self.session_snapshot())
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def dispatch(
        self,
        method: HTTPMethod,
        encoded: EncodedRequest,
        debug_name: str = "",
    ) -> ResponseEnvelope:
        """Send *encoded* with *method* and return the normalised envelope.

        Args:
            method: HTTP method of the endpoint.
            encoded: URL, body, and body headers from the payload encoder.
            debug_name: Dotted endpoint name used in log messages.

        Returns:
            The response envelope; ``status == 0`` on transport failure or
            when the deadline expires.
        """
        headers = await self.build_headers(encoded.headers)
        client = self._get_client()
        logger.debug("%s %s (%s)", method.value, encoded.url, debug_name)
        try:
            request = client.build_request(
                method.value,
                encoded.url,
                headers=headers,
                **encoded.send_kwargs(),
            )
            response = await asyncio.wait_for(client.send(request), timeout=self._timeout)
        except _TRANSPORT_ERRORS as exc:
            logger.error(
                "Network/operational error for %s (%s %s): %r",
                debug_name,
                method.value,
                encoded.url.path,
                exc,
            )
            return failure_envelope(exc)

        logger.debug("%s %s -> %d", method.value, encoded.url, response.status_code)
        return build_envelope(response)
