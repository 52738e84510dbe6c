"""JSON-schema validation of request options and request bodies.

The :class:`Validator` protocol is the seam the request builder depends on.
:class:`JsonSchemaValidator` implements it with :mod:`jsonschema`, reporting
the most relevant failure (``jsonschema.exceptions.best_match``) as a
:class:`~vaultgen.exceptions.SchemaError` that keeps the JSON pointer of the
rejected value.

Schemas without a ``$schema`` keyword are treated as Draft 4, the dialect
the Vault command table is written in.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol

import jsonschema
from jsonschema.exceptions import best_match
from jsonschema.validators import validator_for

from vaultgen.exceptions import SchemaError
from vaultgen.output import debug


class Validator(Protocol):
    """Anything that checks a document against a JSON schema.

    Implementations return ``None`` on success and raise
    :class:`~vaultgen.exceptions.SchemaError` on failure.
    """

    def validate(self, document: Any, schema: Mapping[str, Any]) -> None: ...


def _pointer(parts: Iterable[Any]) -> str:
    """Join path parts into a JSON pointer (``""`` for the document root)."""
    return "".join(
        "/" + str(part).replace("~", "~0").replace("/", "~1") for part in parts
    )


class JsonSchemaValidator:
    """Default :class:`Validator` backed by :mod:`jsonschema`."""

    def __init__(self, default_dialect: type = jsonschema.Draft4Validator) -> None:
        self._default_dialect = default_dialect

    def validate(self, document: Any, schema: Mapping[str, Any]) -> None:
        cls = validator_for(schema, default=self._default_dialect)
        error = best_match(cls(schema).iter_errors(document))
        if error is None:
            return

        location = _pointer(error.absolute_path)
        debug(f"schema violation at '{location}': {error.message}")
        raise SchemaError(
            error.message,
            location=location,
            schema_path=_pointer(error.absolute_schema_path),
        )


def check_schema(schema: Mapping[str, Any], default_dialect: type = jsonschema.Draft4Validator) -> None:
    """Raise :class:`jsonschema.exceptions.SchemaError` if *schema* itself is invalid."""
    validator_for(schema, default=default_dialect).check_schema(schema)
