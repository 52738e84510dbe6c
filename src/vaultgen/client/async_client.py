"""Asynchronous Vault client -- mirrors :class:`~vaultgen.client.sync_client.VaultClient`.

:class:`AsyncVaultClient` dispatches over :class:`httpx.AsyncClient`.
Generated operations and the convenience verbs return awaitables. Request
construction still happens synchronously inside the awaited coroutine, so
concurrent calls on one client never share a request spec; they share only
the immutable :class:`~vaultgen.models.ClientConfig`.

Example::

    async with AsyncVaultClient() as vault:
        status, health = await asyncio.gather(
            vault.invoke("status"),
            vault.invoke("health", {"standbyok": True}),
        )
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from vaultgen.client.base import BaseVaultClient
from vaultgen.client.response import interpret_response
from vaultgen.config import tls_verify
from vaultgen.exceptions import InvalidUsageError, TransportError
from vaultgen.models import RequestSpec
from vaultgen.output import debug


class AsyncVaultClient(BaseVaultClient):
    """Non-blocking client; see :class:`~vaultgen.client.sync_client.VaultClient`.

    *transport* is an :class:`httpx.AsyncBaseTransport`. Use as an async
    context manager, or call :meth:`aclose`.
    """

    def __init__(
        self,
        *args: Any,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncVaultClient:
        self._http()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request method
    # ------------------------------------------------------------------ #

    async def request(
        self,
        path: str,
        method: str,
        body: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        uri: Optional[str] = None,
        inherit: bool = True,
        **transport_options: Any,
    ) -> Any:
        """Send a raw request, bypassing the command table.

        Behaves like :meth:`~vaultgen.client.sync_client.VaultClient.request`
        but is non-blocking.
        """
        spec = self._prepare(path, method, body, headers, uri, inherit, **transport_options)
        return await self._execute(spec)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                transport=self._transport, verify=tls_verify(), timeout=None
            )
        return self._client

    async def _execute(self, spec: RequestSpec) -> Any:
        debug(f"{spec.method.value} {spec.uri}")
        response = await self._send(spec)
        return interpret_response(response, self._health_pattern)

    async def _send(self, spec: RequestSpec) -> httpx.Response:
        """Dispatch *spec*; HTTP error statuses are returned, not raised."""
        kwargs: dict[str, Any] = {
            "method": spec.method.value,
            "url": spec.uri,
            "headers": spec.headers,
            **spec.transport_options,
        }
        if spec.body:
            kwargs["json"] = spec.body

        try:
            return await self._http().request(**kwargs)
        except httpx.InvalidURL as exc:
            raise InvalidUsageError(f"Invalid URI '{spec.uri}': {exc}") from exc
        except (httpx.TransportError, httpx.TooManyRedirects) as exc:
            raise TransportError(f"{spec.method.value} {spec.uri} failed: {exc}") from exc
