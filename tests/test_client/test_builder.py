"""Tests for the request builder."""

from __future__ import annotations

from typing import Any

import pytest

from vaultgen.client.builder import (
    TOKEN_HEADER,
    RequestBuilder,
    encode_query_value,
    expand_query,
)
from vaultgen.exceptions import InvalidUsageError, SchemaError
from vaultgen.models import ClientConfig, CommandDescriptor, HTTPMethod
from vaultgen.table import parse_command_table
from vaultgen.templating import MustacheTemplater
from vaultgen.validation import JsonSchemaValidator


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(token: str | None = None, **kwargs: Any) -> ClientConfig:
    return ClientConfig(endpoint="https://vault.test:8200", token=token, **kwargs)


def _builder() -> RequestBuilder:
    return RequestBuilder(JsonSchemaValidator(), MustacheTemplater())


@pytest.fixture
def table(command_table: dict[str, Any]) -> dict[str, CommandDescriptor]:
    return parse_command_table(command_table)


# ---------------------------------------------------------------------------
# Option merging
# ---------------------------------------------------------------------------


class TestMerge:
    def test_method_path_and_uri(self, table) -> None:
        spec = _builder().build(_config(), table["status"])
        assert spec.method == HTTPMethod.GET
        assert spec.path == "/sys/seal-status"
        assert spec.uri == "https://vault.test:8200/v1/sys/seal-status"

    def test_api_version_in_uri(self, table) -> None:
        spec = _builder().build(_config(api_version="v2"), table["status"])
        assert spec.uri == "https://vault.test:8200/v2/sys/seal-status"

    def test_args_become_body(self, table) -> None:
        spec = _builder().build(_config(), table["addPolicy"], {"name": "ci", "rules": "path {}"})
        assert spec.body == {"name": "ci", "rules": "path {}"}

    def test_descriptor_request_options(self, table) -> None:
        spec = _builder().build(_config(), table["tokenAccessors"])
        assert spec.transport_options == {"timeout": 5}

    def test_per_call_options_beat_descriptor(self, table) -> None:
        spec = _builder().build(_config(), table["tokenAccessors"], request_options={"timeout": 30})
        assert spec.transport_options == {"timeout": 30}

    def test_client_defaults_are_lowest(self, table) -> None:
        config = _config(request_options={"timeout": 1, "follow_redirects": True})
        spec = _builder().build(config, table["tokenAccessors"])
        assert spec.transport_options == {"timeout": 5, "follow_redirects": True}

    def test_inherit_false_drops_client_defaults(self, table) -> None:
        config = _config(request_options={"follow_redirects": True})
        spec = _builder().build(config, table["status"], request_options={"inherit": False})
        assert spec.transport_options == {}

    def test_request_options_key_removed_from_body(self, table) -> None:
        args = {"name": "ci", "request_options": {"timeout": 2}}
        spec = _builder().build(_config(), table["getPolicy"], args)
        assert spec.body == {"name": "ci"}
        assert spec.transport_options == {"timeout": 2}
        assert "request_options" in args

    def test_kwarg_request_options_beat_args_key(self, table) -> None:
        args = {"name": "ci", "request_options": {"timeout": 2}}
        spec = _builder().build(_config(), table["getPolicy"], args, {"timeout": 9})
        assert spec.transport_options == {"timeout": 9}

    def test_unsupported_options_are_dropped(self, table) -> None:
        spec = _builder().build(_config(), table["status"], request_options={"strictSSL": False})
        assert spec.transport_options == {}

    def test_non_mapping_args_rejected(self, table) -> None:
        with pytest.raises(InvalidUsageError):
            _builder().build(_config(), table["status"], ["not", "a", "dict"])  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_missing_required_property(self, table) -> None:
        with pytest.raises(SchemaError) as exc_info:
            _builder().build(_config(), table["getPolicy"], {})
        assert exc_info.value.location == ""
        assert "'name' is a required property" in exc_info.value.message

    def test_wrong_type_reports_location(self, table) -> None:
        with pytest.raises(SchemaError) as exc_info:
            _builder().build(_config(), table["getPolicy"], {"name": 5})
        assert exc_info.value.location == "/name"
        assert exc_info.value.schema_path == "/properties/name/type"

    def test_query_schema_validates_body(self, table) -> None:
        with pytest.raises(SchemaError) as exc_info:
            _builder().build(_config(), table["health"], {"sealedcode": "x"})
        assert exc_info.value.location == "/sealedcode"

    def test_no_schema_accepts_anything(self, table) -> None:
        args = {"name": "x", "nested": {"deep": [1, 2, 3]}, "n": 1.5}
        spec = _builder().build(_config(), table["readSecret"], args)
        assert spec.body == args

    def test_no_schema_skips_validator(self, table) -> None:
        calls: list[Any] = []

        class RecordingValidator(JsonSchemaValidator):
            def validate(self, document, schema):
                calls.append(schema)
                super().validate(document, schema)

        builder = RequestBuilder(RecordingValidator(), MustacheTemplater())
        builder.build(_config(), table["readSecret"], {"name": "x"})
        # Only the structural check on path/method runs.
        assert len(calls) == 1
        assert calls[0]["required"] == ["path", "method"]

    def test_prepare_rejects_unknown_method(self) -> None:
        with pytest.raises(SchemaError) as exc_info:
            _builder().prepare(_config(), {"path": "/sys/health", "method": "PATCH"})
        assert exc_info.value.location == "/method"

    def test_prepare_requires_path(self) -> None:
        with pytest.raises(SchemaError) as exc_info:
            _builder().prepare(_config(), {"method": "GET"})
        assert "'path' is a required property" in exc_info.value.message

    def test_prepare_uppercases_method(self) -> None:
        spec = _builder().prepare(_config(), {"path": "/sys/mounts", "method": "list"})
        assert spec.method == HTTPMethod.LIST

    def test_prepare_rejects_non_mapping_body(self) -> None:
        with pytest.raises(InvalidUsageError):
            _builder().prepare(_config(), {"path": "/x", "method": "PUT", "json": "text"})


# ---------------------------------------------------------------------------
# Query expansion
# ---------------------------------------------------------------------------


class TestQueryExpansion:
    def test_only_declared_keys_in_schema_order(self) -> None:
        descriptor = CommandDescriptor(
            method="GET",
            path="/thing",
            schema={
                "query": {
                    "type": "object",
                    "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
                }
            },
        )
        spec = _builder().build(_config(), descriptor, {"b": 2, "c": 3, "a": 1})
        assert spec.path.endswith("?a=1&b=2")

    def test_no_matching_keys_leaves_path(self, table) -> None:
        spec = _builder().build(_config(), table["health"], {"other": 1})
        assert spec.path == "/sys/health"

    def test_boolean_encoding(self, table) -> None:
        spec = _builder().build(_config(), table["health"], {"standbyok": True})
        assert spec.uri == "https://vault.test:8200/v1/sys/health?standbyok=true"

    def test_body_only_never_expands(self, table) -> None:
        spec = _builder().build(_config(), table["getPolicy"], {"name": "ci"})
        assert "?" not in spec.path

    def test_expand_query_helper(self) -> None:
        assert expand_query(["a", "b"], {"a": 1, "b": 2, "c": 3}) == "?a=1&b=2"
        assert expand_query(["a"], {}) == ""

    def test_encode_query_value(self) -> None:
        assert encode_query_value("a b/c") == "a%20b%2Fc"
        assert encode_query_value("it's(ok)") == "it's(ok)"
        assert encode_query_value(False) == "false"
        assert encode_query_value(None) == "null"
        assert encode_query_value(3) == "3"

    def test_encode_sequences_and_floats(self) -> None:
        assert encode_query_value([1, 2]) == "1%2C2"
        assert encode_query_value(("a b", True)) == "a%20b%2Ctrue"
        assert encode_query_value([1, None, 3]) == "1%2C%2C3"
        assert encode_query_value([]) == ""
        assert encode_query_value(1.0) == "1"
        assert encode_query_value(1.5) == "1.5"

    def test_list_query_value_on_path(self) -> None:
        descriptor = CommandDescriptor(
            method="GET",
            path="/thing",
            schema={"query": {"type": "object", "properties": {"ids": {"type": "array"}}}},
        )
        spec = _builder().build(_config(), descriptor, {"ids": [1, 2]})
        assert spec.path == "/thing?ids=1%2C2"


# ---------------------------------------------------------------------------
# Path rendering
# ---------------------------------------------------------------------------


class TestPathRendering:
    def test_slash_in_variable_is_preserved(self, table) -> None:
        spec = _builder().build(_config(), table["readSecret"], {"name": "foo/bar"})
        assert spec.path == "/secret/foo/bar"
        assert spec.uri.endswith("/v1/secret/foo/bar")

    def test_escaped_slash_entity_is_restored(self, table) -> None:
        class EscapingTemplater:
            def render(self, template, context):
                return template.replace("{{name}}", context["name"].replace("/", "&#x2F;"))

        builder = RequestBuilder(JsonSchemaValidator(), EscapingTemplater())
        spec = builder.build(_config(), table["readSecret"], {"name": "a/b/c"})
        assert spec.path == "/secret/a/b/c"

    def test_default_mount_point(self, table) -> None:
        spec = _builder().build(_config(), table["kvRead"], {"path": "app"})
        assert spec.path == "/secret/data/app"

    def test_custom_mount_point_and_query(self, table) -> None:
        spec = _builder().build(
            _config(), table["kvRead"], {"path": "app", "mount_point": "kv", "version": 2}
        )
        assert spec.path == "/kv/data/app?version=2"

    def test_explicit_uri_wins(self) -> None:
        spec = _builder().prepare(
            _config(),
            {"path": "/sys/health", "method": "GET", "uri": "https://other:8200/v1/sys/health"},
        )
        assert spec.uri == "https://other:8200/v1/sys/health"


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_token_header_attached(self, table) -> None:
        spec = _builder().build(_config(token="abc"), table["status"])
        assert spec.headers == {TOKEN_HEADER: "abc"}

    def test_no_token_no_header(self, table) -> None:
        spec = _builder().build(_config(), table["status"])
        assert TOKEN_HEADER not in spec.headers

    def test_empty_token_no_header(self, table) -> None:
        spec = _builder().build(_config(token=""), table["status"])
        assert TOKEN_HEADER not in spec.headers

    def test_caller_headers_are_copied(self, table) -> None:
        headers = {"X-Vault-Namespace": "team-a"}
        spec = _builder().build(_config(token="abc"), table["status"], request_options={"headers": headers})
        assert spec.headers == {"X-Vault-Namespace": "team-a", TOKEN_HEADER: "abc"}
        assert headers == {"X-Vault-Namespace": "team-a"}

    def test_non_string_header_value_rejected(self, table) -> None:
        with pytest.raises(InvalidUsageError, match="X-N"):
            _builder().build(_config(), table["status"], request_options={"headers": {"X-N": 1}})

    def test_non_mapping_headers_rejected(self, table) -> None:
        with pytest.raises(InvalidUsageError, match="headers must be a mapping"):
            _builder().build(_config(), table["status"], request_options={"headers": ["X-N"]})

    def test_empty_rendered_path_is_usage_error(self) -> None:
        with pytest.raises(InvalidUsageError, match="Invalid request"):
            _builder().prepare(_config(), {"path": "{{name}}", "method": "GET"})

    def test_default_headers_not_mutated(self, table) -> None:
        config = _config(token="abc", request_options={"headers": {"X-Custom": "1"}})
        _builder().build(config, table["status"])
        assert config.request_options["headers"] == {"X-Custom": "1"}


# ---------------------------------------------------------------------------
# Independence between calls
# ---------------------------------------------------------------------------


class TestIdempotence:
    def test_same_args_equal_but_distinct_specs(self, table) -> None:
        builder = _builder()
        config = _config(token="abc")
        args = {"name": "ci"}
        first = builder.build(config, table["getPolicy"], args)
        second = builder.build(config, table["getPolicy"], args)
        assert first == second
        assert first is not second
        assert first.headers is not second.headers
        assert first.body is not second.body

    def test_args_not_mutated(self, table) -> None:
        args = {"name": "x", "version": 1, "path": "p"}
        _builder().build(_config(), table["kvRead"], args)
        assert args == {"name": "x", "version": 1, "path": "p"}
