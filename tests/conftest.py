"""Shared test fixtures for vaultgen.

Provides a small command table, environment isolation for the ``VAULT_*``
variables, a transport spy built on :class:`httpx.MockTransport`, and
output-state management. Fixtures are discovered automatically by pytest.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from vaultgen.client import AsyncVaultClient, VaultClient
from vaultgen.output import OutputManager, reset_output, set_output


ENDPOINT = "https://vault.test:8200"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a quiet manager for the test and drop it afterwards.

    The manager caches sys.stdout/sys.stderr at creation time; CliRunner
    swaps those streams, so a stale manager would write to closed files.
    """
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove VAULT_* variables so tests never pick up a real Vault."""
    for var in ("VAULT_ADDR", "VAULT_TOKEN", "VAULT_SKIP_VERIFY"):
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------


@pytest.fixture
def command_table() -> dict[str, Any]:
    """A compact table covering every validation variant."""
    return {
        "status": {"method": "GET", "path": "/sys/seal-status"},
        "health": {
            "method": "GET",
            "path": "/sys/health",
            "schema": {
                "query": {
                    "type": "object",
                    "properties": {
                        "standbyok": {"type": "boolean"},
                        "sealedcode": {"type": "integer"},
                    },
                }
            },
        },
        "getPolicy": {
            "method": "GET",
            "path": "/sys/policy/{{name}}",
            "schema": {
                "req": {
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                    "required": ["name"],
                }
            },
        },
        "addPolicy": {
            "method": "PUT",
            "path": "/sys/policy/{{name}}",
            "schema": {
                "req": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "rules": {"type": "string"},
                    },
                    "required": ["name", "rules"],
                }
            },
        },
        "readSecret": {
            "method": "GET",
            "path": "/secret/{{name}}",
        },
        "kvRead": {
            "method": "GET",
            "path": "/{{mount_point}}{{^mount_point}}secret{{/mount_point}}/data/{{path}}",
            "schema": {
                "req": {
                    "type": "object",
                    "properties": {"path": {"type": "string"}},
                    "required": ["path"],
                },
                "query": {
                    "type": "object",
                    "properties": {"version": {"type": "integer"}},
                },
            },
        },
        "tokenAccessors": {
            "method": "LIST",
            "path": "/auth/token/accessors",
            "requestOptions": {"timeout": 5},
        },
    }


# ---------------------------------------------------------------------------
# Transport spy
# ---------------------------------------------------------------------------


class TransportSpy:
    """Records every request and answers with a canned response.

    Args:
        status_code: Status of every response.
        body: JSON body of every response (``None`` for an empty body).
    """

    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self.body = body
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is None:
            return httpx.Response(self.status_code)
        return httpx.Response(self.status_code, json=self.body)

    async def async_handler(self, request: httpx.Request) -> httpx.Response:
        return self.handler(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content) if self.last.content else None


@pytest.fixture
def spy() -> TransportSpy:
    return TransportSpy(body={"data": {"ok": True}})


@pytest.fixture
def make_spy() -> Callable[..., TransportSpy]:
    """Factory for spies with a custom status or body."""
    return TransportSpy


# ---------------------------------------------------------------------------
# Clients wired to a spy
# ---------------------------------------------------------------------------


@pytest.fixture
def make_client(command_table: dict[str, Any]) -> Callable[..., VaultClient]:
    """Build a :class:`VaultClient` whose transport is *spy*."""

    def _make(spy: TransportSpy, **kwargs: Any) -> VaultClient:
        kwargs.setdefault("endpoint", ENDPOINT)
        kwargs.setdefault("commands", command_table)
        return VaultClient(transport=httpx.MockTransport(spy.handler), **kwargs)

    return _make


@pytest.fixture
def make_async_client(command_table: dict[str, Any]) -> Callable[..., AsyncVaultClient]:
    """Build an :class:`AsyncVaultClient` whose transport is *spy*."""

    def _make(spy: TransportSpy, **kwargs: Any) -> AsyncVaultClient:
        kwargs.setdefault("endpoint", ENDPOINT)
        kwargs.setdefault("commands", command_table)
        return AsyncVaultClient(transport=httpx.MockTransport(spy.async_handler), **kwargs)

    return _make
