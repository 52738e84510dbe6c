"""Command table -- the declarative list of Vault operations.

The table maps an operation name (``getPolicy``, ``approleLogin``, ...) to a
:class:`~vaultgen.models.CommandDescriptor`. A table covering the common
``sys/``, ``auth/`` and secrets-engine endpoints ships with the package as
``data/commands.yaml``; callers can load their own JSON or YAML file, or pass
an in-memory mapping.

Typical usage::

    from vaultgen.table import load_command_table

    table = load_command_table()              # bundled table
    table = load_command_table("extra.yaml")  # user table
"""

from vaultgen.table.loader import (
    BUNDLED_TABLE,
    load_command_table,
    parse_command_table,
)

__all__ = ["BUNDLED_TABLE", "load_command_table", "parse_command_table"]
