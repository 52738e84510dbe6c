"""Bind command descriptors to a client's request pipeline.

Each generated operation is a closure over three things: the descriptor, the
client's *build* step (arguments -> :class:`~vaultgen.models.RequestSpec`)
and its *execute* step (spec -> dispatched and interpreted result). When
*execute* is a coroutine function the operation is one too, so the async
client's operations are awaited like any other coroutine and raise
:class:`~vaultgen.exceptions.SchemaError` at the ``await``.

Operations hold no state between calls.
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Mapping, Optional

from vaultgen.models import CommandDescriptor, RequestSpec
from vaultgen.output import debug

Operation = Callable[..., Any]

BuildFn = Callable[
    [CommandDescriptor, Optional[Mapping[str, Any]], Optional[Mapping[str, Any]]],
    RequestSpec,
]
ExecuteFn = Callable[[RequestSpec], Any]


def bind_operation(
    name: str,
    descriptor: CommandDescriptor,
    build: BuildFn,
    execute: ExecuteFn,
) -> Operation:
    """Create the callable for one descriptor.

    The returned function has the signature
    ``operation(args=None, *, request_options=None)``.

    Args:
        name: Operation name; becomes the function's ``__name__``.
        descriptor: The descriptor to bind.
        build: Builds the request spec from descriptor, arguments and
            per-call options.
        execute: Dispatches a spec and interprets the response.

    Returns:
        A plain function, or a coroutine function when *execute* is one.
    """
    if inspect.iscoroutinefunction(execute):

        async def operation(
            args: Optional[Mapping[str, Any]] = None,
            *,
            request_options: Optional[Mapping[str, Any]] = None,
        ) -> Any:
            debug(f"{name}: {descriptor.method.value} {descriptor.path}")
            spec = build(descriptor, args, request_options)
            return await execute(spec)

    else:

        def operation(  # type: ignore[misc]
            args: Optional[Mapping[str, Any]] = None,
            *,
            request_options: Optional[Mapping[str, Any]] = None,
        ) -> Any:
            debug(f"{name}: {descriptor.method.value} {descriptor.path}")
            spec = build(descriptor, args, request_options)
            return execute(spec)

    operation.__name__ = name
    operation.__qualname__ = name
    operation.__doc__ = f"{descriptor.method.value} {descriptor.path}"
    return operation


def generate_operations(
    table: Mapping[str, CommandDescriptor],
    build: BuildFn,
    execute: ExecuteFn,
) -> dict[str, Operation]:
    """Bind every entry of *table*, preserving table order."""
    return {
        name: bind_operation(name, descriptor, build, execute)
        for name, descriptor in table.items()
    }
