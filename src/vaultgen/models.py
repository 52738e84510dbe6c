"""Canonical Pydantic models shared across all vaultgen modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Command table models** -- one :class:`CommandDescriptor` per Vault
operation, loaded once from the command table:
    :class:`HTTPMethod`, :class:`DescriptorSchema`, :class:`CommandDescriptor`.

**Validation variants** -- the tagged union returned by
:attr:`CommandDescriptor.validation`, telling the request builder which
checks a descriptor needs:
    :class:`NoValidation`, :class:`BodyOnly`, :class:`BodyAndQuery`.

**Runtime models** -- client configuration and the per-call request:
    :class:`ClientConfig` and :class:`RequestSpec`.

Everything that outlives a single call is frozen. Descriptors accept the
camel-case keys used by the Vault command table (``requestOptions``) as
well as their snake-case field names.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HTTPMethod(str, enum.Enum):
    """HTTP methods accepted by Vault.

    ``LIST`` is Vault's custom verb for listing keys under a path; it is sent
    on the wire as-is.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    LIST = "LIST"


# --- Command table ---


class DescriptorSchema(BaseModel):
    """JSON schemas attached to a descriptor.

    ``req`` constrains the request body. ``query`` constrains the body too,
    and its declared properties are promoted to the query string.
    """

    model_config = ConfigDict(frozen=True)

    req: Optional[dict[str, Any]] = None
    query: Optional[dict[str, Any]] = None


class NoValidation(BaseModel):
    """Descriptor without schemas: arguments go straight to dispatch."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class BodyOnly(BaseModel):
    """Descriptor that validates the request body only."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["body"] = "body"
    request: dict[str, Any]


class BodyAndQuery(BaseModel):
    """Descriptor with a query schema, and optionally a body schema."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["body_and_query"] = "body_and_query"
    request: Optional[dict[str, Any]] = None
    query: dict[str, Any]

    @property
    def query_properties(self) -> list[str]:
        """Property names of the query schema, in declaration order."""
        return list((self.query.get("properties") or {}).keys())


DescriptorValidation = Union[NoValidation, BodyOnly, BodyAndQuery]


class CommandDescriptor(BaseModel):
    """Static definition of one Vault operation.

    Example::

        CommandDescriptor(
            method="GET",
            path="/sys/policy/{{name}}",
            schema={"req": {"type": "object", "required": ["name"]}},
        )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    method: HTTPMethod
    path: str = Field(description="Mustache path template, e.g. /sys/policy/{{name}}")
    schema_: Optional[DescriptorSchema] = Field(default=None, alias="schema")
    request_options: dict[str, Any] = Field(
        default_factory=dict,
        alias="requestOptions",
        description="Default transport options for this operation",
    )

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"path must start with '/': {value!r}")
        return value

    @property
    def validation(self) -> DescriptorValidation:
        """The checks this descriptor requires before dispatch."""
        schema = self.schema_
        if schema is None or (schema.req is None and schema.query is None):
            return NoValidation()
        if schema.query is None:
            return BodyOnly(request=schema.req)
        return BodyAndQuery(request=schema.req, query=schema.query)


# --- Runtime ---


class ClientConfig(BaseModel):
    """Connection settings fixed at client construction.

    Built by :func:`~vaultgen.config.resolve_client_config`. The token is
    the only field a client may swap after construction, and it does so by
    replacing the whole config with a copy.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str
    api_version: str = "v1"
    token: Optional[str] = None
    request_options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("endpoint")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def base_url(self) -> str:
        """Endpoint plus API version segment, e.g. ``http://127.0.0.1:8200/v1``."""
        return f"{self.endpoint}/{self.api_version}"


class RequestSpec(BaseModel):
    """A fully resolved request, ready for the transport.

    Built fresh for every call by :class:`~vaultgen.client.builder.RequestBuilder`
    and never shared between calls.
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str = Field(min_length=1, description="Path after query expansion")
    uri: str = Field(description="Fully qualified, rendered URI")
    headers: dict[str, str] = Field(default_factory=dict)
    body: dict[str, Any] = Field(default_factory=dict)
    transport_options: dict[str, Any] = Field(
        default_factory=dict, description="Opaque per-call options forwarded to httpx"
    )
