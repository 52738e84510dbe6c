"""Load command tables from the bundled data file, a local file, or a mapping.

Both JSON and YAML are accepted with automatic format detection. Every entry
is validated into a :class:`~vaultgen.models.CommandDescriptor` and its JSON
schemas are checked for well-formedness, so a broken table fails at client
construction rather than on the first call.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from jsonschema.exceptions import SchemaError as InvalidSchema
from pydantic import ValidationError

from vaultgen.exceptions import CommandTableError
from vaultgen.models import CommandDescriptor
from vaultgen.validation import check_schema

BUNDLED_TABLE = "commands.yaml"


def load_command_table(source: Optional[Union[str, Path]] = None) -> dict[str, CommandDescriptor]:
    """Load a command table.

    Args:
        source: Path to a JSON or YAML file. ``None`` loads the table bundled
            with the package.

    Returns:
        A dict mapping operation names to descriptors, in file order.

    Raises:
        CommandTableError: If the file is missing, unparseable, or holds a
            malformed descriptor.
    """
    if source is None:
        content = (
            (resources.files("vaultgen.table") / "data" / BUNDLED_TABLE).read_text(encoding="utf-8")
        )
        return parse_command_table(_parse_content(content, hint="yaml"))

    path = Path(source)
    if not path.is_file():
        raise CommandTableError(f"Command table not found: {path}")
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CommandTableError(f"Failed to read command table {path}: {exc}") from exc

    hint = ""
    suffix = path.suffix.lower()
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return parse_command_table(_parse_content(content, hint=hint))


def parse_command_table(raw: Mapping[str, Any]) -> dict[str, CommandDescriptor]:
    """Validate an in-memory table.

    Values may be plain mappings or ready-made
    :class:`~vaultgen.models.CommandDescriptor` instances.

    Raises:
        CommandTableError: Naming the first entry that fails validation.
    """
    table: dict[str, CommandDescriptor] = {}
    for name, entry in raw.items():
        if not isinstance(name, str) or not name.isidentifier():
            raise CommandTableError(f"Invalid operation name: {name!r}")
        if isinstance(entry, CommandDescriptor):
            descriptor = entry
        else:
            try:
                descriptor = CommandDescriptor.model_validate(entry)
            except ValidationError as exc:
                raise CommandTableError(f"Invalid descriptor '{name}': {exc}") from exc

        schema = descriptor.schema_
        if schema is not None:
            for part in (schema.req, schema.query):
                if part is None:
                    continue
                try:
                    check_schema(part)
                except InvalidSchema as exc:
                    raise CommandTableError(
                        f"Invalid schema in descriptor '{name}': {exc.message}"
                    ) from exc

        table[name] = descriptor
    return table


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    JSON is tried first unless the hint says YAML; valid JSON is also valid
    YAML, but the JSON parser gives better errors for JSON files.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise CommandTableError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        return _require_mapping(result)

    msg = "Failed to parse command table as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise CommandTableError(msg)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise CommandTableError(f"Command table must be an object (got {kind})")
    return result
