"""
Tests for IR building: components, operations, parameters and inheritance.
"""

from __future__ import annotations

import pytest

from openapi_tsgen.pipeline.analyzer import IRBuilder, ResolvedParam
from openapi_tsgen.pipeline.analyzer.analyzer import security_scheme_ts, status_sort_key
from openapi_tsgen.pipeline.document import DocumentParser
from openapi_tsgen.pipeline.document.nodes import OAuthFlow, OAuthFlows, SecurityScheme, Server
from openapi_tsgen.pipeline.errors import MissingComponentError, NestedReferenceError, NilDocumentError

OK = {"description": "ok"}


def build(tree, max_depth=30):
    return IRBuilder(max_depth=max_depth).build(DocumentParser().parse(tree))


def operation(ir, path, method):
    return ir.paths[path].operations[method]


class TestParameters:
    """Tests for parameter grouping and merging."""

    def test_path_params_are_required_and_operation_overrides(self):
        tree = {
            "paths": {
                "/pets/{id}": {
                    "parameters": [
                        {"name": "id", "in": "path", "schema": {"type": "string"}},
                        {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                    ],
                    "get": {
                        "parameters": [{"name": "limit", "in": "query", "required": True, "schema": {"type": "string"}}],
                        "responses": {"200": OK},
                    },
                }
            }
        }
        op = operation(build(tree), "/pets/{id}", "get")

        assert op.path_params == {"id": ResolvedParam(location="path", ts="string", required=True)}
        assert op.query_params == {"limit": ResolvedParam(location="query", ts="string", required=True)}

    def test_same_name_in_different_locations_is_kept(self):
        tree = {
            "paths": {
                "/a": {
                    "get": {
                        "parameters": [
                            {"name": "id", "in": "query", "schema": {"type": "string"}},
                            {"name": "id", "in": "header", "schema": {"type": "integer"}},
                            {"name": "session", "in": "cookie", "schema": {"type": "string"}},
                        ],
                        "responses": {"200": OK},
                    }
                }
            }
        }
        op = operation(build(tree), "/a", "get")

        assert op.query_params["id"].ts == "string"
        assert op.header_params["id"].ts == "number"
        assert op.cookie_params["session"].required is False

    def test_referenced_parameter_is_lazy(self):
        tree = {
            "paths": {
                "/a": {
                    "get": {
                        "parameters": [{"$ref": "#/components/parameters/TraceId"}],
                        "responses": {"200": OK},
                    }
                }
            },
            "components": {
                "parameters": {"TraceId": {"name": "X-Trace-Id", "in": "header", "schema": {"type": "string"}}}
            },
        }
        ir = build(tree)
        op = operation(ir, "/a", "get")

        assert ir.parameters == {"TraceId": "string"}
        assert op.header_params["X-Trace-Id"] == ResolvedParam(
            location="header", ts='Components["parameters"]["TraceId"]', required=False
        )

    def test_unknown_location_is_dropped(self):
        tree = {
            "paths": {
                "/a": {
                    "post": {
                        "parameters": [{"name": "payload", "in": "body", "schema": {"type": "object"}}],
                        "responses": {"200": OK},
                    }
                }
            }
        }
        op = operation(build(tree), "/a", "post")

        assert [params for _, params in op.param_groups()] == [{}, {}, {}, {}]

    def test_content_parameter(self):
        tree = {
            "paths": {
                "/a": {
                    "get": {
                        "parameters": [
                            {
                                "name": "filter",
                                "in": "query",
                                "content": {"application/json": {"schema": {"type": "object"}}},
                            }
                        ],
                        "responses": {"200": OK},
                    }
                }
            }
        }
        op = operation(build(tree), "/a", "get")

        assert op.query_params["filter"].ts == "Record<string, unknown>"


class TestOperations:
    """Tests for request bodies, responses and inheritance."""

    def test_security_and_servers_inheritance(self):
        tree = {
            "servers": [{"url": "https://a.example.com"}],
            "security": [{"api_key": []}],
            "paths": {
                "/a": {
                    "servers": [{"url": "https://b.example.com"}],
                    "get": {"responses": {"200": OK}},
                    "post": {
                        "security": [{"oauth": ["write"]}],
                        "servers": [{"url": "https://c.example.com"}],
                        "responses": {"200": OK},
                    },
                },
                "/b": {"get": {"responses": {"200": OK}}},
            },
        }
        ir = build(tree)

        inherited = operation(ir, "/a", "get")
        assert inherited.security == [{"api_key": []}]
        assert inherited.servers == [Server(url="https://b.example.com")]

        own = operation(ir, "/a", "post")
        assert own.security == [{"oauth": ["write"]}]
        assert own.servers == [Server(url="https://c.example.com")]

        assert operation(ir, "/b", "get").servers == [Server(url="https://a.example.com")]
        assert ir.servers == [Server(url="https://a.example.com")]

    def test_response_order(self):
        tree = {"paths": {"/a": {"get": {"responses": {"default": OK, "404": OK, "200": OK}}}}}
        op = operation(build(tree), "/a", "get")

        assert list(op.responses) == ["200", "404", "default"]
        assert op.responses["200"] == "never"

    def test_status_sort_key(self):
        codes = ["default", "5XX", "404", "200", "2XX"]
        assert sorted(codes, key=status_sort_key) == ["200", "404", "2XX", "5XX", "default"]

    def test_status_sort_key_only_accepts_plain_digits(self):
        codes = ["2_00", " 200", "404", "200"]
        assert sorted(codes, key=status_sort_key) == ["200", "404", " 200", "2_00"]

    def test_distinct_media_types_union(self):
        content = {
            "text/plain": {"schema": {"type": "string"}},
            "application/xml": {"schema": {"type": "number"}},
            "application/json": {"schema": {"type": "string"}},
        }
        tree = {"paths": {"/a": {"get": {"responses": {"200": {"description": "ok", "content": content}}}}}}

        assert operation(build(tree), "/a", "get").responses["200"] == "(string | number)"

    def test_media_type_without_schema(self):
        tree = {"paths": {"/a": {"get": {"responses": {"200": {"description": "ok", "content": {"text/plain": {}}}}}}}}

        assert operation(build(tree), "/a", "get").responses["200"] == "unknown"

    def test_response_headers(self):
        response = {
            "description": "ok",
            "headers": {
                "X-Rate": {"required": True, "schema": {"type": "integer"}},
                "X-Id": {"schema": {"type": "string"}},
            },
            "content": {"application/json": {"schema": {"type": "string"}}},
        }
        tree = {"paths": {"/a": {"get": {"responses": {"200": response}}}}}

        assert operation(build(tree), "/a", "get").responses["200"] == (
            '{\n  headers: {\n    "X-Id"?: string;\n    "X-Rate": number;\n  };\n  body: string;\n}'
        )

    def test_referenced_response_header_is_lazy(self):
        response = {"description": "ok", "headers": {"X-Id": {"$ref": "#/components/headers/Id"}}}
        tree = {
            "paths": {"/a": {"get": {"responses": {"200": response}}}},
            "components": {"headers": {"Id": {"required": True, "schema": {"type": "string"}}}},
        }
        ir = build(tree)

        assert ir.headers == {"Id": "string"}
        assert operation(ir, "/a", "get").responses["200"] == (
            '{\n  headers: {\n    "X-Id": Components["headers"]["Id"];\n  };\n  body: never;\n}'
        )

    def test_request_body(self):
        body = {
            "content": {
                "application/json": {
                    "schema": {"type": "object", "properties": {"status": {"enum": ["on", "off"]}}},
                }
            }
        }
        tree = {"paths": {"/a": {"post": {"requestBody": body, "responses": {"200": OK}}}}}
        ir = build(tree)

        assert operation(ir, "/a", "post").request_body == "{\n  status?: PostApplicationJsonStatusEnum;\n}"
        assert list(ir.enums) == ["PostApplicationJsonStatusEnum"]

    def test_request_body_without_content(self):
        tree = {"paths": {"/a": {"post": {"requestBody": {}, "responses": {"200": OK}}}}}
        assert operation(build(tree), "/a", "post").request_body == "unknown"

    def test_missing_request_body(self):
        tree = {"paths": {"/a": {"get": {"responses": {"200": OK}}}}}
        assert operation(build(tree), "/a", "get").request_body == "never"

    def test_referenced_request_body_is_lazy(self):
        tree = {
            "paths": {
                "/a": {"post": {"requestBody": {"$ref": "#/components/requestBodies/New"}, "responses": {"200": OK}}}
            },
            "components": {
                "requestBodies": {"New": {"content": {"application/json": {"schema": {"type": "string"}}}}}
            },
        }
        ir = build(tree)

        assert ir.request_bodies == {"New": "string"}
        assert operation(ir, "/a", "post").request_body == 'Components["requestBodies"]["New"]'

    def test_path_item_without_operations_is_skipped(self):
        tree = {"paths": {"/a": {"parameters": []}}}
        assert build(tree).paths == {}

    def test_path_item_reference(self):
        tree = {
            "webhooks": {"ping": {"$ref": "#/components/pathItems/Ping"}},
            "components": {"pathItems": {"Ping": {"post": {"responses": {"200": OK}}}}},
        }
        ir = build(tree)

        assert ir.webhooks["ping"].operations["post"].responses == {"200": "never"}
        assert ir.paths == {}


class TestComponents:
    """Tests for component sections."""

    TREE = {
        "components": {
            "schemas": {
                "Pet": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "integer", "readOnly": True},
                        "secret": {"type": "string", "writeOnly": True},
                    },
                }
            },
            "responses": {
                "PetResponse": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}}}
            },
            "requestBodies": {
                "PetBody": {"content": {"application/json": {"schema": {"$ref": "#/components/schemas/Pet"}}}}
            },
        }
    }

    def test_schemas_keep_every_property(self):
        ir = build(self.TREE)
        assert ir.schemas["Pet"] == "{\n  id?: number;\n  secret?: string;\n}"

    def test_responses_use_output_projection(self):
        ir = build(self.TREE)
        assert ir.responses["PetResponse"] == "{\n  id?: number;\n}"

    def test_request_bodies_use_input_projection(self):
        ir = build(self.TREE)
        assert ir.request_bodies["PetBody"] == "{\n  secret?: string;\n}"

    def test_nested_component_reference(self):
        tree = {
            "components": {
                "parameters": {
                    "A": {"$ref": "#/components/parameters/B"},
                    "B": {"$ref": "#/components/parameters/C"},
                    "C": {"name": "c", "in": "query"},
                }
            }
        }
        with pytest.raises(NestedReferenceError) as exc_info:
            build(tree)

        assert str(exc_info.value) == (
            "components.parameters.A: nested parameters $ref: '#/components/parameters/C'"
        )

    def test_component_alias_resolves_one_level(self):
        tree = {
            "components": {
                "headers": {
                    "Alias": {"$ref": "#/components/headers/Id"},
                    "Id": {"schema": {"type": "integer"}},
                }
            }
        }
        assert build(tree).headers == {"Alias": "number", "Id": "number"}


class TestSecuritySchemes:
    """Tests for security scheme compilation."""

    def test_api_key(self):
        scheme = SecurityScheme(type="apiKey", name="X-Api-Key", location="header")
        assert security_scheme_ts(scheme) == '{\n  in: "header";\n  name: "X-Api-Key";\n  type: "apiKey";\n}'

    def test_api_key_without_name(self):
        assert security_scheme_ts(SecurityScheme(type="apiKey")) == (
            '{\n  in: string;\n  name: string;\n  type: "apiKey";\n}'
        )

    def test_http_with_description(self):
        scheme = SecurityScheme(type="http", scheme="bearer", bearer_format="JWT", description="Token auth")
        assert security_scheme_ts(scheme) == (
            '{\n  description?: string;\n  bearerFormat: "JWT";\n  scheme: "bearer";\n  type: "http";\n}'
        )

    def test_oauth2(self):
        flow = OAuthFlow(token_url="https://auth.example.com/token", scopes={"write": "Write access"})
        scheme = SecurityScheme(type="oauth2", flows=OAuthFlows(client_credentials=flow))

        assert security_scheme_ts(scheme) == (
            "{\n"
            "  flows: {\n"
            "    clientCredentials: {\n"
            "      tokenUrl: string;\n"
            "      scopes: {\n"
            "        write: string;\n"
            "      };\n"
            "    };\n"
            "  };\n"
            '  type: "oauth2";\n'
            "}"
        )

    def test_oauth2_flow_without_scopes(self):
        flow = OAuthFlow(authorization_url="https://a", token_url="https://t")
        scheme = SecurityScheme(type="oauth2", flows=OAuthFlows(authorization_code=flow))

        assert "authorizationUrl: string;\n      tokenUrl: string;\n      scopes: Record<string, string>;" in (
            security_scheme_ts(scheme)
        )

    def test_open_id_connect(self):
        scheme = SecurityScheme(type="openIdConnect", open_id_connect_url="https://id.example.com")
        assert security_scheme_ts(scheme) == (
            '{\n  openIdConnectUrl: "https://id.example.com";\n  type: "openIdConnect";\n}'
        )

    def test_other_types(self):
        assert security_scheme_ts(SecurityScheme(type="mutualTLS")) == '{\n  type: "mutualTLS";\n}'
        assert security_scheme_ts(SecurityScheme()) == "Record<string, unknown>"


class TestBuild:
    """Tests for whole-document builds."""

    def test_nil_document(self):
        with pytest.raises(NilDocumentError):
            IRBuilder().build(None)

    def test_error_is_labelled_with_location(self):
        tree = {"paths": {"/pets": {"get": {"responses": {"410": {"$ref": "#/components/responses/Gone"}}}}}}

        with pytest.raises(MissingComponentError) as exc_info:
            build(tree)

        assert str(exc_info.value) == 'path "/pets": get responses: missing components.responses: Gone'

    def test_webhook_error_label(self):
        tree = {
            "webhooks": {
                "ping": {"post": {"parameters": [{"$ref": "#/components/parameters/X"}], "responses": {"200": OK}}}
            }
        }
        with pytest.raises(MissingComponentError) as exc_info:
            build(tree)

        assert str(exc_info.value) == 'webhook "ping": post params: missing components.parameters: X'

    def test_builds_are_deterministic(self):
        tree = {
            "openapi": "3.1.0",
            "paths": {
                "/a": {
                    "get": {
                        "responses": {
                            "200": {
                                "description": "ok",
                                "content": {"application/json": {"schema": {"enum": ["x", "y"]}}},
                            }
                        }
                    }
                }
            },
        }
        document = DocumentParser().parse(tree)

        first = IRBuilder().build(document)
        second = IRBuilder().build(document)

        assert first == second
        assert list(first.enums) == ["Get200ApplicationJsonEnum"]
        assert first.openapi_version == "3.1.0"
