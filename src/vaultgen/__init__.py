"""vaultgen -- a HashiCorp Vault HTTP client generated from a command table.

A declarative table maps operation names to an HTTP method, a mustache path
template and optional JSON schemas. vaultgen turns every entry into a
callable that validates its arguments, renders the path, attaches the
``X-Vault-Token`` header, sends the request and normalises the response::

    from vaultgen import VaultClient

    with VaultClient(endpoint="https://vault.internal:8200") as vault:
        vault.invoke("approleLogin", {"role_id": "...", "secret_id": "..."})
        vault.read("secret/data/app")

Modules:
    client: Sync and async clients, request builder, response interpreter.
    generator: Binding of descriptors to callable operations.
    table: Command table loading (bundled YAML or user files).
    models: Pydantic models shared across the package.
    config: Environment-aware client configuration.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr output and debug tracing.
    app: The ``vaultgen`` command-line interface.
"""

__version__ = "0.1.0"

from vaultgen.client import AsyncVaultClient, VaultClient  # noqa: E402
from vaultgen.exceptions import (  # noqa: E402
    DomainError,
    SchemaError,
    TransportError,
    VaultError,
    VaultgenError,
)

__all__ = [
    "AsyncVaultClient",
    "DomainError",
    "SchemaError",
    "TransportError",
    "VaultClient",
    "VaultError",
    "VaultgenError",
    "__version__",
]
