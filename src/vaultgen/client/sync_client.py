"""Synchronous Vault client.

:class:`VaultClient` dispatches over :class:`httpx.Client`. The transport is
configured so that every HTTP status comes back as data: the client never
calls ``raise_for_status`` and leaves classification to
:func:`~vaultgen.client.response.interpret_response`. Only failures that
leave no response at all (connection refused, DNS, timeouts) surface as
:class:`~vaultgen.exceptions.TransportError`.

There is no retry and no default timeout. A failed call fails once, and a
call only times out when a `timeout` request option says so.

See Also:
    :class:`~vaultgen.client.async_client.AsyncVaultClient` for the
    non-blocking equivalent.
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


class VaultClient(BaseVaultClient):
    """Blocking client with one generated operation per command table entry.

    Accepts every argument of :class:`~vaultgen.client.base.BaseVaultClient`
    plus *transport*, an :class:`httpx.BaseTransport` to send requests through
    (tests pass an :class:`httpx.MockTransport`).

    The underlying :class:`httpx.Client` is opened on first use. Use the
    client as a context manager, or call :meth:`close`, to release it.

    Example::

        with VaultClient(token="s.abc") as vault:
            vault.invoke("addPolicy", {"name": "ci", "rules": "..."})
            policy = vault.operation("getPolicy")({"name": "ci"})
            vault.write("secret/app", {"password": "hunter2"})
    """

    def __init__(
        self,
        *args: Any,
        transport: Optional[httpx.BaseTransport] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> VaultClient:
        self._http()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request method
    # ------------------------------------------------------------------ #

    def request(
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

        Args:
            path: Path below the API version, with leading slash
                (``/sys/health``). May contain mustache placeholders
                filled from *body*.
            method: ``GET``, ``POST``, ``PUT``, ``DELETE`` or ``LIST``.
            body: JSON body.
            headers: Extra headers. The token header is added on top.
            uri: Full URI overriding ``endpoint/version/path``.
            inherit: Merge the client's default request options.
            **transport_options: Per-request httpx options (``timeout``, ...).

        Returns:
            The parsed response body.

        Raises:
            SchemaError: On a missing path or an unsupported method.
            InvalidUsageError: On malformed headers or an unparseable URI.
            TransportError: When no response is received.
            DomainError: On a non-success status.
        """
        spec = self._prepare(path, method, body, headers, uri, inherit, **transport_options)
        return self._execute(spec)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                transport=self._transport, verify=tls_verify(), timeout=None
            )
        return self._client

    def _execute(self, spec: RequestSpec) -> Any:
        debug(f"{spec.method.value} {spec.uri}")
        response = self._send(spec)
        return interpret_response(response, self._health_pattern)

    def _send(self, spec: RequestSpec) -> httpx.Response:
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
            return self._http().request(**kwargs)
        except httpx.InvalidURL as exc:
            raise InvalidUsageError(f"Invalid URI '{spec.uri}': {exc}") from exc
        except (httpx.TransportError, httpx.TooManyRedirects) as exc:
            raise TransportError(f"{spec.method.value} {spec.uri} failed: {exc}") from exc
