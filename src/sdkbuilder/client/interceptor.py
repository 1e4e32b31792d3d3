"""Invoke the invalid-credential callback for HTTP 401 envelopes."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional

from sdkbuilder.models import ResponseEnvelope

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401

InvalidCredentialCallback = Callable[[ResponseEnvelope], Any]


async def intercept_invalid_credential(
    envelope: ResponseEnvelope,
    callback: Optional[InvalidCredentialCallback],
) -> ResponseEnvelope:
    """Run *callback* once if *envelope* reports a 401, then return the envelope.

    The callback may be a plain function or a coroutine function; an
    awaitable result is awaited before returning. Exceptions raised by the
    callback propagate to the caller unchanged.
    """
    if envelope.status != UNAUTHORIZED or callback is None:
        return envelope
    logger.debug("401 received, invoking invalid-credential callback")
    result = callback(envelope)
    if inspect.isawaitable(result):
        await result
    return envelope
