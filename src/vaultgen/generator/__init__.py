"""Operation generator -- one callable per command table entry.

Typical usage::

    from vaultgen.generator import generate_operations

    ops = generate_operations(table, build=client._build, execute=client._execute)
    ops["getPolicy"]({"name": "default"})

Sub-modules:

* :mod:`~vaultgen.generator.operations` -- binds a descriptor to the
  client's build and execute steps.
"""

from vaultgen.generator.operations import Operation, bind_operation, generate_operations

__all__ = ["Operation", "bind_operation", "generate_operations"]
