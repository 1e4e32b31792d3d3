"""Typer application and CLI entry point for sdkbuilder.

Registers the built-in sub-commands (``endpoints``, ``call``, ``session``)
on the root application. :func:`main` is the console-script entry point
declared in ``pyproject.toml``: it maps :class:`~sdkbuilder.exceptions.SDKBuilderError`
to its exit code and writes a crash log for anything unexpected.

See Also:
    :mod:`sdkbuilder.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from sdkbuilder import __version__
from sdkbuilder.commands.call import call_command
from sdkbuilder.commands.endpoints import endpoints_command
from sdkbuilder.commands.session import session_app
from sdkbuilder.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="sdkbuilder",
    help="Call HTTP APIs described by a declarative endpoint tree.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("endpoints")(endpoints_command)
app.command("call")(call_command)
app.add_typer(session_app, name="session", help="Session store management.")

_LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"sdkbuilder {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send library log records to stderr when *verbose*, silence them otherwise.

    Only the ``sdkbuilder`` logger is touched; the handler is replaced on
    every invocation so it always writes to the current ``sys.stderr``.
    """
    logger = logging.getLogger("sdkbuilder")
    for handler in list(logger.handlers):
        if getattr(handler, "_sdkbuilder_cli", False):
            logger.removeHandler(handler)
    if not verbose:
        logger.setLevel(logging.CRITICAL)
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler._sdkbuilder_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and library logs."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~sdkbuilder.output.OutputManager` and
    configures library logging from the CLI flags.
    """
    from sdkbuilder.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback under ``<data_dir>/logs`` and return its path."""
    from sdkbuilder.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``sdkbuilder`` console script.

    :class:`~sdkbuilder.exceptions.SDKBuilderError` exits with the error's
    ``exit_code``; any other exception produces a crash log and a generic
    failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from sdkbuilder.exceptions import SDKBuilderError
        from sdkbuilder.output import error

        if isinstance(exc, SDKBuilderError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
