"""Configuration files, XDG paths, and atomic writes.

This module handles everything sdkbuilder reads from or writes to disk:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.sdkbuilder/`` on macOS and Windows. See :func:`get_data_dir` and
  :func:`get_sessions_dir`.
* **Endpoint files** -- :func:`load_endpoints_file` reads a JSON or YAML
  document describing an endpoint tree, optionally with the client settings
  around it, and :func:`resolve_client_config` layers environment overrides
  and explicit arguments on top.
* **Atomic writes** -- :func:`atomic_write` writes through a temp file and
  ``os.replace`` so a crash never leaves a half-written session file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from sdkbuilder.exceptions import ConfigError
from sdkbuilder.models import ClientConfig

_APP_NAME = "sdkbuilder"

ENV_BASE_URL = "SDKBUILDER_BASE_URL"
ENV_TIMEOUT_MS = "SDKBUILDER_TIMEOUT_MS"

_CLIENT_KEYS = ("base", "endpoints", "default_headers", "request_timeout_ms")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def get_data_dir() -> Path:
    """Return the data directory (sessions, crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/sdkbuilder/`` (default
    ``~/.local/share/sdkbuilder/``). On macOS/Windows: ``~/.sdkbuilder/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_sessions_dir() -> Path:
    """Return ``<data_dir>/sessions/``, creating it if necessary."""
    path = get_data_dir() / "sessions"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str, permissions: Optional[int] = None) -> None:
    """Write *data* to *path* atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. When *permissions*
    is given they are applied to the temp file before any content is
    written. On failure the temp file is removed and the error re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        if permissions is not None:
            os.chmod(tmp_path, permissions)
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Endpoint files ---


def load_endpoints_file(path: str | Path) -> dict[str, Any]:
    """Load an endpoints document from a JSON or YAML file.

    Two layouts are accepted. A *bare tree* maps names straight to endpoint
    definitions and groups::

        users:
          getAll: {path: /users, method: GET}

    A *client document* wraps the tree with client settings::

        base: https://api.example.com
        request_timeout_ms: 5000
        endpoints:
          users:
            getAll: {path: /users, method: GET}

    Args:
        path: File path. ``.json`` is parsed as JSON, anything else as YAML
            (a superset of JSON).

    Returns:
        A dict with an ``endpoints`` key and any client settings found.

    Raises:
        ConfigError: If the file is missing, unparsable, or not a mapping.
    """
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Endpoints file not found: {file_path}")
    try:
        text = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid endpoints file at {file_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Endpoints file {file_path} must contain a mapping")

    if isinstance(data.get("endpoints"), dict):
        return {key: data[key] for key in _CLIENT_KEYS if key in data}
    return {"endpoints": data}


def resolve_client_config(
    document: dict[str, Any],
    cli_base_url: Optional[str] = None,
    cli_timeout_ms: Optional[int] = None,
) -> ClientConfig:
    """Resolve the effective :class:`~sdkbuilder.models.ClientConfig`.

    Precedence (high to low):
        1. Explicit arguments (``cli_base_url``, ``cli_timeout_ms``)
        2. Environment variables (``SDKBUILDER_BASE_URL``, ``SDKBUILDER_TIMEOUT_MS``)
        3. Values in the endpoints document
        4. Defaults

    Raises:
        ConfigError: If no base URL is available or the result fails validation.
    """
    values = dict(document)

    env_base = os.environ.get(ENV_BASE_URL)
    if cli_base_url is not None:
        values["base"] = cli_base_url
    elif env_base:
        values["base"] = env_base

    env_timeout = os.environ.get(ENV_TIMEOUT_MS)
    if cli_timeout_ms is not None:
        values["request_timeout_ms"] = cli_timeout_ms
    elif env_timeout:
        try:
            values["request_timeout_ms"] = int(env_timeout)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_TIMEOUT_MS} must be an integer, got {env_timeout!r}"
            ) from exc

    if not values.get("base"):
        raise ConfigError(
            f"No base URL: set 'base' in the endpoints file, {ENV_BASE_URL}, or --base"
        )
    try:
        return ClientConfig.model_validate(values)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc
