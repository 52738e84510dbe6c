"""Typer application and CLI entry point for vaultgen.

Exposes the generated operations and the low-level verbs on the command
line::

    vaultgen ops                                   # list operations
    vaultgen call getPolicy --args '{"name": "default"}'
    vaultgen read secret/data/app
    vaultgen write secret/data/app --data '{"data": {"k": "v"}}'

Connection settings come from ``--endpoint``/``--token``/``--api-version``
and fall back to ``VAULT_ADDR``/``VAULT_TOKEN``. Response bodies go to
stdout; errors go to stderr and set the exit code from
:mod:`vaultgen.exit_codes`.
"""

from __future__ import annotations

import json
import signal
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import typer

from vaultgen import __version__
from vaultgen.client import VaultClient
from vaultgen.exceptions import InvalidUsageError, VaultgenError
from vaultgen.exit_codes import EXIT_GENERIC_FAILURE
from vaultgen.output import OutputFormat, OutputManager, error, format_response, print_table, set_output


app = typer.Typer(
    name="vaultgen",
    help="Call the HashiCorp Vault HTTP API through a generated command table.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"vaultgen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", "-e", help="Vault address (default: $VAULT_ADDR)."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="Vault token (default: $VAULT_TOKEN)."
    ),
    api_version: Optional[str] = typer.Option(
        None, "--api-version", help="API version segment (default: v1)."
    ),
    commands: Optional[str] = typer.Option(
        None, "--commands", "-c", help="Command table file (JSON or YAML)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace requests on stderr."),
) -> None:
    """Install the output manager and stash connection options in ``ctx.obj``."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["endpoint"] = endpoint
    ctx.obj["token"] = token
    ctx.obj["api_version"] = api_version
    ctx.obj["commands"] = commands


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _make_client(ctx: typer.Context) -> VaultClient:
    obj = ctx.obj or {}
    return VaultClient(
        endpoint=obj.get("endpoint"),
        api_version=obj.get("api_version"),
        token=obj.get("token"),
        commands=obj.get("commands"),
    )


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Turn :class:`VaultgenError` into a stderr message and its exit code."""
    try:
        yield
    except VaultgenError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _parse_json_object(value: Optional[str], option: str) -> dict[str, Any]:
    if value is None:
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"{option} is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InvalidUsageError(f"{option} must be a JSON object")
    return parsed


def _transport_options(timeout: Optional[float]) -> dict[str, Any]:
    return {"timeout": timeout} if timeout is not None else {}


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("ops")
def list_operations(ctx: typer.Context) -> None:
    """List the operations in the command table."""
    with _handle_errors():
        client = _make_client(ctx)
        rows = [
            [name, descriptor.method.value, descriptor.path, descriptor.validation.kind]
            for name, descriptor in client.commands.items()
        ]
    print_table(["name", "method", "path", "validation"], rows, title="Operations")


@app.command("call")
def call_operation(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Operation name, e.g. getPolicy."),
    args: Optional[str] = typer.Option(None, "--args", "-a", help="Arguments as a JSON object."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
) -> None:
    """Invoke a generated operation."""
    with _handle_errors():
        arguments = _parse_json_object(args, "--args")
        with _make_client(ctx) as client:
            result = client.invoke(name, arguments, request_options=_transport_options(timeout))
    format_response(result)


@app.command("read")
def read_path(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path below /v1, e.g. secret/data/app."),
) -> None:
    """GET a path."""
    with _handle_errors(), _make_client(ctx) as client:
        result = client.read(path)
    format_response(result)


@app.command("write")
def write_path(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path below /v1."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Body as a JSON object."),
) -> None:
    """PUT a JSON body to a path."""
    with _handle_errors():
        body = _parse_json_object(data, "--data")
        with _make_client(ctx) as client:
            result = client.write(path, body)
    format_response(result)


@app.command("list")
def list_path(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path below /v1."),
) -> None:
    """LIST the keys under a path."""
    with _handle_errors(), _make_client(ctx) as client:
        result = client.list(path)
    format_response(result)


@app.command("delete")
def delete_path(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path below /v1."),
) -> None:
    """DELETE a path."""
    with _handle_errors(), _make_client(ctx) as client:
        result = client.delete(path)
    format_response(result)


@app.command("help")
def help_path(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Path below /v1."),
) -> None:
    """Show Vault's built-in help for a path."""
    with _handle_errors(), _make_client(ctx) as client:
        result = client.help(path)
    format_response(result)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Console-script entry point.

    :class:`~vaultgen.exceptions.VaultgenError` raised outside a command
    exits with the error's ``exit_code``; anything else exits with
    :data:`~vaultgen.exit_codes.EXIT_GENERIC_FAILURE`.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except VaultgenError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
