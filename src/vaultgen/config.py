"""Client configuration with environment fallbacks and precedence resolution.

Three environment variables mirror the ones the ``vault`` CLI reads:

* ``VAULT_ADDR`` -- default endpoint (else ``http://127.0.0.1:8200``).
* ``VAULT_TOKEN`` -- default auth token (else no token header is sent).
* ``VAULT_SKIP_VERIFY`` -- any non-empty value disables TLS certificate
  verification.

:func:`resolve_client_config` merges explicit arguments over the
environment over the defaults and returns a frozen
:class:`~vaultgen.models.ClientConfig`.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from vaultgen.exceptions import ConfigError
from vaultgen.models import ClientConfig

ENV_ADDR = "VAULT_ADDR"
ENV_TOKEN = "VAULT_TOKEN"
ENV_SKIP_VERIFY = "VAULT_SKIP_VERIFY"

DEFAULT_ENDPOINT = "http://127.0.0.1:8200"
DEFAULT_API_VERSION = "v1"


def resolve_client_config(
    endpoint: Optional[str] = None,
    api_version: Optional[str] = None,
    token: Optional[str] = None,
    request_options: Optional[Mapping[str, Any]] = None,
) -> ClientConfig:
    """Resolve the client configuration.

    Precedence (high to low):
        1. Explicit arguments
        2. Environment variables (``VAULT_ADDR``, ``VAULT_TOKEN``)
        3. Defaults

    Empty strings count as unset, both for arguments and for the
    environment.

    Args:
        endpoint: Vault server URL.
        api_version: API version path segment.
        token: Auth token sent as ``X-Vault-Token``.
        request_options: Default transport options applied to every call.

    Returns:
        The frozen :class:`~vaultgen.models.ClientConfig`.

    Raises:
        ConfigError: If the resolved values fail validation.
    """
    resolved_endpoint = endpoint or os.environ.get(ENV_ADDR) or DEFAULT_ENDPOINT
    resolved_token = token or os.environ.get(ENV_TOKEN) or None

    try:
        return ClientConfig(
            endpoint=resolved_endpoint,
            api_version=api_version or DEFAULT_API_VERSION,
            token=resolved_token,
            request_options=dict(request_options or {}),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc


def tls_verify() -> bool:
    """Return ``False`` when ``VAULT_SKIP_VERIFY`` is set to a non-empty value."""
    return not os.environ.get(ENV_SKIP_VERIFY)
