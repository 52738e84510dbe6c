"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~vaultgen.exceptions.VaultgenError` subclass.
Shell wrappers can inspect the exit code to tell a rejected request from a
Vault-side failure without parsing stderr.

Example::

    $ vaultgen call getPolicy --args '{"name": "missing"}'
    $ echo $?
    5   # EXIT_VAULT_ERROR -- Vault answered with a non-success status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, unknown operation, or a request that failed schema validation."""

EXIT_VAULT_ERROR = 5
"""Vault returned a non-success HTTP status outside the health-check exemption."""

EXIT_TRANSPORT_ERROR = 6
"""No response was received (connection refused, DNS failure, timeout)."""

EXIT_COMMAND_TABLE_ERROR = 7
"""The command table could not be loaded or contains a malformed descriptor."""
