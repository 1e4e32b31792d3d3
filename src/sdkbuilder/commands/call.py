"""``sdkbuilder call`` -- call one endpoint from the command line.

Builds a client from an endpoints file, resolves the endpoint by its dotted
name, sends a single request, and prints the envelope: the status line on
stderr and the body on stdout. The bearer token comes from a
:class:`~sdkbuilder.session.file_store.FileSessionStore`, so a token saved
with ``sdkbuilder session set token ...`` is picked up automatically.

Exit status is ``0`` for a 2xx response and ``1`` otherwise.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer

from sdkbuilder.exit_codes import EXIT_INVALID_USAGE, EXIT_REQUEST_FAILED
from sdkbuilder.output import error, format_envelope, warning
from sdkbuilder.session.file_store import DEFAULT_SESSION_NAME


def _parse_json_option(name: str, raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        error(f"{name} must be valid JSON, got: {raw}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None


def call_command(
    file: Path = typer.Argument(help="Endpoints file (JSON or YAML)."),
    name: str = typer.Argument(help="Dotted endpoint name, e.g. 'users.getById'."),
    path_value: Optional[str] = typer.Argument(
        None, metavar="[VALUE]", help="Value for the first path placeholder."
    ),
    params: Optional[str] = typer.Option(
        None, "--params", help="Path parameters as a JSON object."
    ),
    data: Optional[str] = typer.Option(
        None, "--data", "-d", help="Payload as JSON (query for GET/DELETE, body otherwise)."
    ),
    base: Optional[str] = typer.Option(None, "--base", help="Override the base URL."),
    timeout_ms: Optional[int] = typer.Option(
        None, "--timeout", min=1, help="Request deadline in milliseconds."
    ),
    session: str = typer.Option(
        DEFAULT_SESSION_NAME, "--session", "-s", help="Session to read the token from."
    ),
) -> None:
    """Call the endpoint NAME defined in FILE.

    Example::

        sdkbuilder call api.yaml users.getById 2
        sdkbuilder call api.yaml users.update --params '{"id": 2}' --data '{"name": "x"}'
        sdkbuilder call api.yaml users.getAll --data '{"tags": ["a", "b"]}'
    """
    from sdkbuilder.builder import SDKBuilder
    from sdkbuilder.config import load_endpoints_file, resolve_client_config
    from sdkbuilder.generator.endpoint_tree import resolve_endpoint
    from sdkbuilder.session.file_store import FileSessionStore

    path_params: Any = _parse_json_option("--params", params)
    if path_params is not None and not isinstance(path_params, dict):
        error("--params must be a JSON object")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    if path_params is not None and path_value is not None:
        error("Pass either VALUE or --params, not both")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    if path_params is None:
        path_params = path_value

    payload = _parse_json_option("--data", data)

    document = load_endpoints_file(file)
    config = resolve_client_config(document, cli_base_url=base, cli_timeout_ms=timeout_ms)
    builder = SDKBuilder.from_config(config, session_store=FileSessionStore(session))
    for issue in builder.issues:
        warning(f"{issue.path}: {issue.message}")
    function = resolve_endpoint(builder.fetch, name)

    async def _run() -> Any:
        async with builder:
            return await function.with_params(path_params, payload)

    envelope = asyncio.run(_run())
    format_envelope(envelope)
    if not envelope.success:
        raise typer.Exit(code=EXIT_REQUEST_FAILED)
