"""State and behaviour shared by :class:`VaultClient` and :class:`AsyncVaultClient`.

The base owns everything that does not touch the network: the resolved
:class:`~vaultgen.models.ClientConfig`, the injected validator and
templater, the command table and the generated operations. Subclasses add
the dispatcher (``_send``) and the ``_execute``/``request`` pair, sync or
async.

The convenience verbs (``read``, ``write``, ``list``, ``delete``, ``help``)
simply return ``self.request(...)``, so on the async client they return an
awaitable.
"""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Pattern, Union

from vaultgen.client.builder import RequestBuilder
from vaultgen.client.response import HEALTH_PATH_PATTERN
from vaultgen.config import resolve_client_config
from vaultgen.exceptions import UnknownOperationError
from vaultgen.generator import Operation, generate_operations
from vaultgen.models import ClientConfig, CommandDescriptor, RequestSpec
from vaultgen.output import debug
from vaultgen.table import load_command_table, parse_command_table
from vaultgen.templating import MustacheTemplater, Templater
from vaultgen.validation import JsonSchemaValidator, Validator

CommandSource = Union[str, Path, Mapping[str, Any], None]


class BaseVaultClient:
    """Configuration, command table and generated operations.

    Args:
        endpoint: Vault server URL. Defaults to ``VAULT_ADDR``, else
            ``http://127.0.0.1:8200``.
        api_version: API version path segment (default ``v1``).
        token: Auth token. Defaults to ``VAULT_TOKEN``.
        request_options: Default transport options for every call
            (``timeout``, ``headers``, ...).
        validator: JSON-schema validator; :class:`JsonSchemaValidator` by
            default.
        templater: Path templater; :class:`MustacheTemplater` by default.
        commands: Command table as a mapping, a JSON/YAML file path, or
            ``None`` for the bundled table.
        health_pattern: Request paths matching this pattern are returned as
            data whatever their status.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        api_version: Optional[str] = None,
        token: Optional[str] = None,
        request_options: Optional[Mapping[str, Any]] = None,
        *,
        validator: Optional[Validator] = None,
        templater: Optional[Templater] = None,
        commands: CommandSource = None,
        health_pattern: Pattern[str] = HEALTH_PATH_PATTERN,
    ) -> None:
        self._config = resolve_client_config(endpoint, api_version, token, request_options)
        self._builder = RequestBuilder(
            validator or JsonSchemaValidator(),
            templater or MustacheTemplater(),
        )
        self._health_pattern = health_pattern

        if commands is None or isinstance(commands, (str, Path)):
            table = load_command_table(commands)
        else:
            table = parse_command_table(commands)
        self._commands: Mapping[str, CommandDescriptor] = MappingProxyType(table)
        self._operations: Mapping[str, Operation] = MappingProxyType(
            generate_operations(table, self._build, self._execute)
        )
        debug(f"client for {self._config.base_url} with {len(table)} operations")

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def endpoint(self) -> str:
        return self._config.endpoint

    @property
    def api_version(self) -> str:
        return self._config.api_version

    @property
    def token(self) -> Optional[str]:
        return self._config.token

    @token.setter
    def token(self, value: Optional[str]) -> None:
        """Replace the token; calls started afterwards send the new one."""
        self._config = self._config.model_copy(update={"token": value or None})

    # ------------------------------------------------------------------ #
    # Generated operations
    # ------------------------------------------------------------------ #

    @property
    def commands(self) -> Mapping[str, CommandDescriptor]:
        """The command table, read-only."""
        return self._commands

    @property
    def operations(self) -> Mapping[str, Operation]:
        """Generated operations keyed by name, read-only."""
        return self._operations

    def names(self) -> list[str]:
        """Operation names in command table order."""
        return list(self._operations)

    def operation(self, name: str) -> Operation:
        """Look up a generated operation.

        Raises:
            UnknownOperationError: If *name* is not in the command table.
        """
        try:
            return self._operations[name]
        except KeyError:
            raise UnknownOperationError(f"Unknown operation: {name}") from None

    def invoke(
        self,
        name: str,
        args: Optional[Mapping[str, Any]] = None,
        *,
        request_options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Call the operation *name* with *args*."""
        return self.operation(name)(args, request_options=request_options)

    # ------------------------------------------------------------------ #
    # Convenience verbs
    # ------------------------------------------------------------------ #

    def read(self, path: str, **options: Any) -> Any:
        """``GET /<path>``."""
        debug(f"read: {path}")
        return self.request(f"/{path}", "GET", **options)

    def write(self, path: str, data: Optional[Mapping[str, Any]] = None, **options: Any) -> Any:
        """``PUT /<path>`` with *data* as the JSON body."""
        debug(f"write: {path}: {sorted(data or {})}")
        return self.request(f"/{path}", "PUT", body=data, **options)

    def list(self, path: str, **options: Any) -> Any:
        """``LIST /<path>``."""
        debug(f"list: {path}")
        return self.request(f"/{path}", "LIST", **options)

    def delete(self, path: str, **options: Any) -> Any:
        """``DELETE /<path>``."""
        debug(f"delete: {path}")
        return self.request(f"/{path}", "DELETE", **options)

    def help(self, path: str, **options: Any) -> Any:
        """``GET /<path>?help=1`` -- Vault's built-in endpoint documentation."""
        debug(f"help: {path}")
        return self.request(f"/{path}?help=1", "GET", **options)

    # ------------------------------------------------------------------ #
    # Hooks for subclasses
    # ------------------------------------------------------------------ #

    def request(self, path: str, method: str, **options: Any) -> Any:  # pragma: no cover
        raise NotImplementedError

    def _execute(self, spec: RequestSpec) -> Any:  # pragma: no cover
        raise NotImplementedError

    def _build(
        self,
        descriptor: CommandDescriptor,
        args: Optional[Mapping[str, Any]],
        request_options: Optional[Mapping[str, Any]],
    ) -> RequestSpec:
        return self._builder.build(self._config, descriptor, args, request_options)

    def _prepare(
        self,
        path: str,
        method: str,
        body: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        uri: Optional[str] = None,
        inherit: bool = True,
        **transport_options: Any,
    ) -> RequestSpec:
        options: dict[str, Any] = {**transport_options, "path": path, "method": method}
        if body is not None:
            options["json"] = body
        if headers is not None:
            options["headers"] = headers
        if uri is not None:
            options["uri"] = uri
        return self._builder.prepare(self._config, options, inherit=inherit)
