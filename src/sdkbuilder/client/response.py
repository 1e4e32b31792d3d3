"""Normalise an :class:`httpx.Response` into a :class:`ResponseEnvelope`.

Body parsing is driven by the ``Content-Type`` header and never raises:

* 204 or an empty body gives ``None``.
* ``application/json`` is decoded; malformed JSON gives ``None``.
* ``text/*`` is decoded as text.
* Anything else (images, archives, ...) gives ``None``.

Client-side failures, where no response exists at all, are turned into a
``status == 0`` envelope by :func:`failure_envelope`.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from sdkbuilder.models import ResponseEnvelope

TIMEOUT_MESSAGE = "Request timed out"
GENERIC_FAILURE_MESSAGE = "A client-side error occurred."


def extract_response_data(response: httpx.Response) -> Any:
    """Parse the body of *response* according to its content type.

    Args:
        response: A response whose body has already been read.

    Returns:
        A JSON-decoded object, a ``str``, or ``None`` when the body is
        empty, undecodable, or of an unsupported content type.
    """
    if response.status_code == 204 or not response.content:
        return None

    content_type = response.headers.get("content-type", "").lower()
    if "application/json" in content_type:
        try:
            return json.loads(response.content)
        except ValueError:
            return None
    if "text/" in content_type:
        try:
            return response.text
        except (LookupError, UnicodeDecodeError):
            return None
    return None


def lift_error_message(data: Any) -> Any:
    """Copy a nested ``error.message`` to a top-level ``message`` if absent.

    Gives callers one place to look for an error description whether the
    server answers ``{"message": ...}`` or ``{"error": {"message": ...}}``.
    """
    if not isinstance(data, dict) or "message" in data:
        return data
    error = data.get("error")
    if isinstance(error, dict) and error.get("message"):
        data["message"] = error["message"]
    return data


def build_envelope(response: httpx.Response) -> ResponseEnvelope:
    """Build the envelope for a response that reached the client."""
    data = lift_error_message(extract_response_data(response))
    return ResponseEnvelope(status=response.status_code, response=data)


def is_timeout(exc: BaseException) -> bool:
    return isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException))


def failure_envelope(exc: BaseException) -> ResponseEnvelope:
    """Build the ``status == 0`` envelope for a network or timeout failure.

    Args:
        exc: The exception raised while sending the request.

    Returns:
        An envelope whose ``response`` is ``{"message", "error_details"}``.
        Timeouts always report :data:`TIMEOUT_MESSAGE` instead of the
        transport's own text.
    """
    if is_timeout(exc):
        message = TIMEOUT_MESSAGE
    else:
        message = str(exc) or GENERIC_FAILURE_MESSAGE
    return ResponseEnvelope(
        status=0,
        response={"message": message, "error_details": exc},
    )
