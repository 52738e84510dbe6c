"""Vault HTTP clients.

Provides a blocking and a non-blocking client that share one request
pipeline: :mod:`~vaultgen.client.builder` turns descriptors and arguments
into request specs, the client dispatches them over :mod:`httpx`, and
:mod:`~vaultgen.client.response` turns responses into data or typed errors.

Classes:
    :class:`VaultClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncVaultClient` -- non-blocking client backed by
    :class:`httpx.AsyncClient`.

Example::

    from vaultgen.client import VaultClient

    with VaultClient() as vault:
        print(vault.invoke("health"))
"""

from vaultgen.client.async_client import AsyncVaultClient
from vaultgen.client.sync_client import VaultClient

__all__ = ["VaultClient", "AsyncVaultClient"]
