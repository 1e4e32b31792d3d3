"""Request-function generation.

Turns the declarative endpoint tree into the callable mirror exposed as
``SDKBuilder.fetch`` and decides, per call, how positional arguments split
into path parameters and payload.

Modules:
    endpoint_tree: Validation pass and the read-only namespace mirror.
    arguments: Call-time argument disambiguation and ``$params`` handling.
"""

from sdkbuilder.generator.arguments import (
    PARAMS_KEY,
    CallArguments,
    from_bag,
    resolve_call_arguments,
)
from sdkbuilder.generator.endpoint_tree import (
    EndpointNamespace,
    build_client_tree,
    resolve_endpoint,
    validate_endpoint_tree,
    walk_endpoints,
)

__all__ = [
    "PARAMS_KEY",
    "CallArguments",
    "EndpointNamespace",
    "build_client_tree",
    "from_bag",
    "resolve_call_arguments",
    "resolve_endpoint",
    "validate_endpoint_tree",
    "walk_endpoints",
]
