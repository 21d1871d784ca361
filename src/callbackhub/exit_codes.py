"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~callbackhub.exceptions.CallbackHubError` subclass.
Shell wrappers can inspect the exit code to tell a broken config file apart
from a misbehaving plugin callback without parsing stderr.

Example::

    $ callbackhub inspect order --plugin Blog
    $ echo $?
    10   # EXIT_CALLBACK_ERROR -- the dispatcher was misused
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_CALLBACK_ERROR = 10
"""The callback dispatcher was used out of order or with an unknown event."""

EXIT_CALLBACK_EXECUTION_ERROR = 11
"""One or more plugin callbacks raised while handling a lifecycle event."""
