"""``sdkbuilder session`` -- view and edit a file-backed session store.

The entries written here are the ones ``sdkbuilder call`` (and any
:class:`~sdkbuilder.builder.SDKBuilder` built with the same
:class:`~sdkbuilder.session.file_store.FileSessionStore`) reads its bearer
token from.
"""

from __future__ import annotations

import typer

from sdkbuilder.output import format_response, info, success
from sdkbuilder.session.file_store import DEFAULT_SESSION_NAME, FileSessionStore

session_app = typer.Typer(no_args_is_help=True)

_SESSION_OPTION = typer.Option(
    DEFAULT_SESSION_NAME, "--session", "-s", help="Session name."
)


@session_app.command("show")
def session_show(session: str = _SESSION_OPTION) -> None:
    """Print every entry of the session as JSON.

    Example::

        sdkbuilder session show
        sdkbuilder session show --session staging
    """
    store = FileSessionStore(session)
    info(f"Session file: {store.path}")
    format_response(store.snapshot())


@session_app.command("set")
def session_set(
    key: str = typer.Argument(help="Entry name, e.g. 'token'."),
    value: str = typer.Argument(help="Entry value."),
    session: str = _SESSION_OPTION,
) -> None:
    """Store one entry.

    Example::

        sdkbuilder session set token eyJhbGciOi...
    """
    FileSessionStore(session).store({key: value})
    success(f"Set {key}")


@session_app.command("unset")
def session_unset(
    keys: list[str] = typer.Argument(help="Entry names to remove."),
    session: str = _SESSION_OPTION,
) -> None:
    """Remove one or more entries."""
    FileSessionStore(session).dispose(keys)
    success(f"Removed {', '.join(keys)}")


@session_app.command("clear")
def session_clear(session: str = _SESSION_OPTION) -> None:
    """Delete every entry of the session."""
    FileSessionStore(session).clear_all()
    success(f"Cleared session '{session}'")
