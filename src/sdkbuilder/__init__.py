"""sdkbuilder -- Turn a declarative endpoint tree into a typed async API client.

Describe an HTTP API as a nested mapping of named endpoints, each with a path
template and a method, and get back a tree of awaitable request functions
with the same shape::

    from sdkbuilder import SDKBuilder

    api = SDKBuilder(
        base="https://api.example.com",
        endpoints={"users": {"getById": {"path": "/users/:id", "method": "GET"}}},
    )
    envelope = await api.fetch.users.getById(2)

Every call resolves to a :class:`~sdkbuilder.models.ResponseEnvelope`; HTTP
and transport failures are reported in the envelope, never raised. A bearer
token is read from the session store on every call, and an optional hook
fires whenever the server answers 401.

Modules:
    builder: The :class:`SDKBuilder` facade and generated request functions.
    models: Pydantic models shared across the entire package.
    config: XDG-aware data directories and endpoint-file loading.
    client: URL building, payload encoding, dispatch, response normalisation.
    generator: Endpoint tree validation and argument resolution.
    session: Session stores holding the bearer token.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer CLI entry point.
"""

from sdkbuilder.builder import EndpointFunction, SDKBuilder
from sdkbuilder.client.forms import FileUpload, FormData
from sdkbuilder.exceptions import (
    ConfigError,
    EndpointNotFoundError,
    SDKBuilderError,
    ValidationError,
)
from sdkbuilder.models import ClientConfig, EndpointDefinition, HTTPMethod, ResponseEnvelope
from sdkbuilder.session import FileSessionStore, MemorySessionStore, SessionStore

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "ConfigError",
    "EndpointDefinition",
    "EndpointFunction",
    "EndpointNotFoundError",
    "FileSessionStore",
    "FileUpload",
    "FormData",
    "HTTPMethod",
    "MemorySessionStore",
    "ResponseEnvelope",
    "SDKBuilder",
    "SDKBuilderError",
    "SessionStore",
    "ValidationError",
    "__version__",
]
