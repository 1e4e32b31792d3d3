"""Numeric process exit codes used by the ``sdkbuilder`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~sdkbuilder.exceptions.SDKBuilderError` subclass.
Shell wrappers can inspect the exit code to tell a rejected argument apart
from a failed request without parsing stderr.

Example::

    $ sdkbuilder call endpoints.yaml users.getById 99
    $ echo $?
    1   # EXIT_REQUEST_FAILED -- the envelope reported success=false
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or a request returned a failure envelope."""

EXIT_REQUEST_FAILED = 1
"""The endpoint was called but the envelope reported ``success = false``."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. a non-scalar ``$params`` value)."""

EXIT_NOT_FOUND = 4
"""The requested endpoint name does not exist in the endpoint tree."""
