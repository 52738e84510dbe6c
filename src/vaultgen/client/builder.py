"""Turn a descriptor plus call arguments into a :class:`~vaultgen.models.RequestSpec`.

This is the request-construction half of the client. It is pure: no I/O,
no shared state, a fresh ``RequestSpec`` per call. The pipeline, in order:

1. **Merge options** -- client defaults, then the descriptor's
   ``request_options``, then per-call overrides, then the descriptor's
   method and path and the call arguments as ``json``. Later sources win.
   ``inherit=False`` drops the client defaults.
2. **Structural check** -- ``path`` and ``method`` must be present and
   ``method`` must be a Vault verb.
3. **Body validation** -- against the descriptor's request schema and, when
   declared, its query schema.
4. **Query expansion** -- query-schema properties present in the body are
   appended to the path as ``?name=value&...`` in schema order.
5. **Path rendering** -- mustache substitution against the body.
6. **Headers** -- ``X-Vault-Token`` when the client has a token.

Any validation failure raises :class:`~vaultgen.exceptions.SchemaError`
before a request is formed.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

from pydantic import ValidationError

from vaultgen.exceptions import InvalidUsageError
from vaultgen.models import (
    BodyAndQuery,
    ClientConfig,
    CommandDescriptor,
    HTTPMethod,
    NoValidation,
    RequestSpec,
)
from vaultgen.output import debug
from vaultgen.templating import Templater, render_path
from vaultgen.validation import Validator

TOKEN_HEADER = "X-Vault-Token"

REQUEST_OPTIONS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {"type": "string", "minLength": 1},
        "method": {"type": "string", "enum": [m.value for m in HTTPMethod]},
    },
    "required": ["path", "method"],
}

# Options the builder consumes; the rest are candidates for the transport.
_BUILDER_KEYS = frozenset({"path", "method", "json", "headers", "uri"})

# Per-request options httpx accepts on ``Client.request``.
TRANSPORT_OPTION_KEYS = frozenset({"timeout", "follow_redirects", "extensions"})

# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class RequestBuilder:
    """Builds request specs for one client.

    Args:
        validator: Checks option and body shapes against JSON schemas.
        templater: Renders mustache path templates.
    """

    def __init__(self, validator: Validator, templater: Templater) -> None:
        self._validator = validator
        self._templater = templater

    def build(
        self,
        config: ClientConfig,
        descriptor: CommandDescriptor,
        args: Optional[Mapping[str, Any]] = None,
        request_options: Optional[Mapping[str, Any]] = None,
    ) -> RequestSpec:
        """Build the request for a generated operation.

        Args:
            config: The client's current configuration.
            descriptor: The operation's descriptor.
            args: Call arguments. Used as the JSON body and as the path
                template context. A ``request_options`` key is removed from
                the body and treated as per-call overrides.
            request_options: Per-call transport overrides (``timeout``,
                ``headers``, ``inherit``, ...). Win over the
                ``request_options`` key in *args*.

        Returns:
            A new :class:`~vaultgen.models.RequestSpec`.

        Raises:
            SchemaError: If the arguments violate the descriptor's schemas.
            InvalidUsageError: If *args* is not a mapping or a header value
                is not a string.
        """
        if args is not None and not isinstance(args, Mapping):
            raise InvalidUsageError(
                f"Operation arguments must be a mapping, got {type(args).__name__}"
            )
        body = dict(args or {})
        overrides = dict(body.pop("request_options", None) or {})
        overrides.update(request_options or {})
        inherit = overrides.pop("inherit", True)

        options = {
            **descriptor.request_options,
            **overrides,
            "method": descriptor.method.value,
            "path": descriptor.path,
            "json": body,
        }
        merged = self._merge(config, options, inherit)
        self._check_options(merged)

        validation = descriptor.validation
        if isinstance(validation, NoValidation):
            return self._finish(config, merged)

        if validation.request is not None:
            self._validator.validate(body, validation.request)
        if isinstance(validation, BodyAndQuery):
            self._validator.validate(body, validation.query)
            merged["path"] += expand_query(validation.query_properties, body)

        return self._finish(config, merged)

    def prepare(
        self,
        config: ClientConfig,
        options: Mapping[str, Any],
        inherit: bool = True,
    ) -> RequestSpec:
        """Build a request from raw options (the low-level ``request`` path).

        Args:
            config: The client's current configuration.
            options: ``path``, ``method`` and optionally ``json``,
                ``headers``, ``uri`` and transport options.
            inherit: Merge the client's default request options underneath.

        Raises:
            SchemaError: If ``path`` or ``method`` is missing or invalid.
        """
        merged = self._merge(config, options, inherit)
        self._check_options(merged)
        return self._finish(config, merged)

    # ------------------------------------------------------------------ #
    # Pipeline steps
    # ------------------------------------------------------------------ #

    @staticmethod
    def _merge(config: ClientConfig, options: Mapping[str, Any], inherit: bool) -> dict[str, Any]:
        if not inherit:
            return dict(options)
        return {**config.request_options, **options}

    def _check_options(self, merged: dict[str, Any]) -> None:
        method = merged.get("method")
        if isinstance(method, str):
            merged["method"] = method.upper()
        self._validator.validate(
            {key: merged[key] for key in ("path", "method") if key in merged},
            REQUEST_OPTIONS_SCHEMA,
        )

    def _finish(self, config: ClientConfig, merged: dict[str, Any]) -> RequestSpec:
        body = merged.get("json")
        if body is None:
            body = {}
        elif not isinstance(body, Mapping):
            raise InvalidUsageError(
                f"Request body must be a mapping, got {type(body).__name__}"
            )

        path = render_path(self._templater, merged["path"], body)
        uri = merged.get("uri") or f"{config.base_url}{path}"

        raw_headers = merged.get("headers") or {}
        if not isinstance(raw_headers, Mapping):
            raise InvalidUsageError(
                f"Request headers must be a mapping, got {type(raw_headers).__name__}"
            )
        headers = dict(raw_headers)
        for name, value in headers.items():
            if not isinstance(name, str) or not isinstance(value, str):
                raise InvalidUsageError(
                    f"Header {name!r} must map a string name to a string value, "
                    f"got {type(value).__name__}"
                )
        if isinstance(config.token, str) and config.token:
            headers[TOKEN_HEADER] = config.token

        transport_options: dict[str, Any] = {}
        for key, value in merged.items():
            if key in _BUILDER_KEYS:
                continue
            if key in TRANSPORT_OPTION_KEYS:
                transport_options[key] = value
            else:
                debug(f"ignoring unsupported request option '{key}'")

        try:
            return RequestSpec(
                method=HTTPMethod(merged["method"]),
                path=path,
                uri=uri,
                headers=headers,
                body=dict(body),
                transport_options=transport_options,
            )
        except ValidationError as exc:
            raise InvalidUsageError(f"Invalid request: {exc}") from exc


def expand_query(properties: list[str], body: Mapping[str, Any]) -> str:
    """Return the query string for *properties* present in *body*.

    Args:
        properties: Query-schema property names in declaration order.
        body: The call arguments.

    Returns:
        ``"?a=1&b=2"``, or ``""`` when none of the properties are present.

    Example::

        >>> expand_query(["a", "b"], {"a": 1, "b": 2, "c": 3})
        '?a=1&b=2'
    """
    params = [f"{name}={encode_query_value(body[name])}" for name in properties if name in body]
    return f"?{'&'.join(params)}" if params else ""


def encode_query_value(value: Any) -> str:
    """Percent-encode a value the way ``encodeURIComponent`` does.

    Example::

        >>> encode_query_value([1, 2])
        '1%2C2'
        >>> encode_query_value(2.0)
        '2'
    """
    return quote(_query_text(value), safe=_URI_COMPONENT_SAFE)


def _query_text(value: Any, nested: bool = False) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        # Inside an array a null element stringifies to nothing.
        return "" if nested else "null"
    if isinstance(value, (list, tuple)):
        return ",".join(_query_text(item, nested=True) for item in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
