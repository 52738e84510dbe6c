"""Exception hierarchy for vaultgen.

All exceptions inherit from :class:`VaultgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`vaultgen.exit_codes`.
Library callers catch the specific subclasses; the CLI entry point in
:func:`vaultgen.app.main` catches ``VaultgenError`` and exits with the
appropriate code.

Subclass hierarchy::

    VaultgenError (exit 1)
    +-- InvalidUsageError      (exit 2)
    |   +-- UnknownOperationError
    +-- SchemaError            (exit 2)
    +-- DomainError            (exit 5)
    +-- TransportError         (exit 6)
    +-- CommandTableError      (exit 7)
    +-- ConfigError            (exit 1)

``SchemaError`` is raised before any network I/O. ``TransportError`` means
no response object was ever formed. ``DomainError`` wraps a well-formed HTTP
response whose status Vault considers a failure.
"""

from __future__ import annotations

from typing import Any, Optional

from vaultgen.exit_codes import (
    EXIT_COMMAND_TABLE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_ERROR,
    EXIT_VAULT_ERROR,
)


class VaultgenError(Exception):
    """Base exception for all vaultgen errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(VaultgenError):
    """Raised for invalid CLI arguments or malformed call arguments."""

    exit_code = EXIT_INVALID_USAGE


class UnknownOperationError(InvalidUsageError):
    """Raised when an operation name is not present in the command table."""


class SchemaError(VaultgenError):
    """Raised when request options or a request body violate a JSON schema.

    Keeps the validator's structured fields so callers can inspect exactly
    which value was rejected.

    Args:
        message: The validator's human-readable message.
        location: JSON pointer of the offending value (``""`` for the root).
        schema_path: JSON pointer into the schema of the failing keyword.
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, message: str, location: str = "", schema_path: str = ""):
        super().__init__(message)
        self.message = message
        self.location = location
        self.schema_path = schema_path


class DomainError(VaultgenError):
    """Raised when Vault answers with a non-success status.

    The message is the first entry of the response's ``errors`` array, or
    ``Status <code>`` when the body carries no structured errors.

    Args:
        message: The error message.
        status_code: HTTP status code of the response.
        body: Parsed response body (dict, text or ``None``).
    """

    exit_code = EXIT_VAULT_ERROR

    def __init__(self, message: str, status_code: int, body: Optional[Any] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


VaultError = DomainError


class TransportError(VaultgenError):
    """Raised when no HTTP response was received (connect, DNS, timeout)."""

    exit_code = EXIT_TRANSPORT_ERROR


class CommandTableError(VaultgenError):
    """Raised when the command table cannot be loaded or a descriptor is malformed."""

    exit_code = EXIT_COMMAND_TABLE_ERROR


class ConfigError(VaultgenError):
    """Raised for configuration problems (bad endpoint, unreadable option values)."""

    exit_code = EXIT_GENERIC_FAILURE
