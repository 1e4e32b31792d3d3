"""Exception hierarchy for sdkbuilder.

All exceptions inherit from :class:`SDKBuilderError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`sdkbuilder.exit_codes`.
Only construction problems and argument validation are raised; transport
failures are folded into a :class:`~sdkbuilder.models.ResponseEnvelope` with
``status == 0`` and never surface as exceptions.

Subclass hierarchy::

    SDKBuilderError          (exit 1)
    +-- ConfigError          (exit 1)
    +-- ValidationError      (exit 2)
    +-- EndpointNotFoundError (exit 4)
"""

from sdkbuilder.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
)


class SDKBuilderError(Exception):
    """Base exception for all sdkbuilder errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SDKBuilderError):
    """Raised at construction for a missing or unusable ``base`` URL or endpoints file."""

    exit_code = EXIT_GENERIC_FAILURE


class ValidationError(SDKBuilderError):
    """Raised before any network activity when a ``$params`` value is not a scalar."""

    exit_code = EXIT_INVALID_USAGE


class EndpointNotFoundError(SDKBuilderError):
    """Raised when a dotted endpoint name does not resolve to a generated function."""

    exit_code = EXIT_NOT_FOUND
