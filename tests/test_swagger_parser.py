import re
from pathlib import Path

import pytest

from swagger_docs.parser.detect import definition_ref, detect_version, schema_definitions
from swagger_docs.parser.swagger import (
    index_endpoints,
    load_document,
    operation_parameters,
    request_body,
    responses,
)
from swagger_docs.schema.resolver import InvalidDocumentError

FIXTURES = Path(__file__).parent / "fixtures"


def _op(tags=None, summary=None):
    op = {"responses": {"200": {"description": "OK"}}}
    if tags is not None:
        op["tags"] = tags
    if summary:
        op["summary"] = summary
    return op


class TestDetectVersion:
    def test_detect_openapi_yaml(self):
        assert detect_version(load_document(FIXTURES / "petstore.yaml")) == "openapi3"

    def test_detect_swagger_json(self):
        assert detect_version(load_document(FIXTURES / "swagger2.json")) == "swagger2"

    def test_detect_unknown(self):
        assert detect_version({"info": {}}) == "unknown"
        assert detect_version([]) == "unknown"

    def test_schema_definitions(self):
        assert "Pet" in schema_definitions(load_document(FIXTURES / "petstore.yaml"))
        assert "User" in schema_definitions(load_document(FIXTURES / "swagger2.json"))
        assert schema_definitions({"openapi": "3.0.0", "components": []}) == {}

    def test_definition_ref(self):
        assert definition_ref({"swagger": "2.0"}, "User") == "#/definitions/User"
        assert definition_ref({"openapi": "3.1.0"}, "a/b") == "#/components/schemas/a~1b"


class TestLoadDocument:
    def test_load_yaml(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        assert doc["info"]["title"] == "Swagger Petstore"

    def test_load_json(self):
        doc = load_document(FIXTURES / "swagger2.json")
        assert doc["info"]["version"] == "2.1"

    def test_non_mapping_rejected(self, tmp_path):
        f = tmp_path / "list.yaml"
        f.write_text("- just\n- a list\n")
        with pytest.raises(InvalidDocumentError):
            load_document(f)

    def test_unparseable_rejected(self, tmp_path):
        f = tmp_path / "broken.yaml"
        f.write_text("paths: [unclosed\n")
        with pytest.raises(InvalidDocumentError):
            load_document(f)


class TestIndexEndpoints:
    def test_petstore_groups(self):
        groups = index_endpoints(load_document(FIXTURES / "petstore.yaml"))
        assert [g.tag for g in groups] == ["pets", "store", "other"]
        pets = groups[0]
        assert [(e.method, e.path, e.ordinal) for e in pets.endpoints] == [
            ("get", "/pets", 1),
            ("post", "/pets", 2),
            ("get", "/pets/{petId}", 3),
        ]
        assert groups[2].title == "Other Endpoints"
        assert groups[2].endpoints[0].anchor_id == "endpoint-other-1"

    def test_path_level_keys_are_not_operations(self):
        groups = index_endpoints(load_document(FIXTURES / "petstore.yaml"))
        methods = [e.method for g in groups for e in g.endpoints]
        assert "parameters" not in methods

    def test_anchor_uniqueness(self):
        doc = {
            "paths": {
                "/users": {"get": _op(["Users"]), "post": _op(["Users"])},
                "/orders": {"get": _op(["Orders"])},
                "/ping": {"get": _op()},
            }
        }
        groups = index_endpoints(doc)
        anchors = [e.anchor_id for g in groups for e in g.endpoints]
        assert anchors == [
            "endpoint-Users-1",
            "endpoint-Users-2",
            "endpoint-Orders-1",
            "endpoint-other-1",
        ]
        assert len(set(anchors)) == 4
        for anchor in anchors:
            assert re.fullmatch(r"endpoint-(Users|Orders|other)-\d+", anchor)

    def test_ordinals_follow_document_order_not_tag_order(self):
        doc = {
            "paths": {
                "/a": {"get": _op(["B"])},
                "/b": {"get": _op(["A"])},
                "/c": {"get": _op(["B"])},
            }
        }
        groups = index_endpoints(doc)
        assert [g.tag for g in groups] == ["B", "A"]
        assert [(e.path, e.ordinal) for e in groups[0].endpoints] == [("/a", 1), ("/c", 2)]

    def test_primary_tag_is_first(self):
        groups = index_endpoints({"paths": {"/x": {"get": _op(["first", "second"])}}})
        assert [g.tag for g in groups] == ["first"]

    def test_untagged_group_last(self):
        doc = {"paths": {"/a": {"get": _op()}, "/b": {"get": _op(["T"])}}}
        assert [g.tag for g in index_endpoints(doc)] == ["T", "other"]

    def test_explicit_other_tag_shares_numbering(self):
        doc = {"paths": {"/a": {"get": _op(["other"])}, "/b": {"get": _op([])}}}
        groups = index_endpoints(doc)
        assert len(groups) == 1
        assert [e.anchor_id for e in groups[0].endpoints] == ["endpoint-other-1", "endpoint-other-2"]

    def test_deterministic(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        first = [e.anchor_id for g in index_endpoints(doc) for e in g.endpoints]
        second = [e.anchor_id for g in index_endpoints(doc) for e in g.endpoints]
        assert first == second

    def test_malformed_paths(self):
        assert index_endpoints({}) == []
        assert index_endpoints({"paths": []}) == []
        assert index_endpoints({"paths": {"/a": None, "/b": {"get": "nope"}}}) == []

    def test_summary_fallback(self):
        groups = index_endpoints({"paths": {"/ping": {"get": _op()}}})
        assert groups[0].endpoints[0].summary == "GET /ping"


class TestOperationParts:
    def test_path_level_parameters_merged(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        endpoint = index_endpoints(doc)[0].endpoints[0]
        names = [p["name"] for p in operation_parameters(doc, endpoint)]
        assert names == ["X-Request-Id", "limit"]

    def test_openapi3_request_body(self):
        doc = load_document(FIXTURES / "petstore.yaml")
        post = doc["paths"]["/pets"]["post"]
        body = request_body(doc, post)
        assert body["required"] is True
        assert "application/json" in body["content"]

    def test_swagger2_body_parameter(self):
        doc = load_document(FIXTURES / "swagger2.json")
        body = request_body(doc, doc["paths"]["/users"]["post"])
        assert body["required"] is True
        assert body["content"]["application/json"]["schema"] == {"$ref": "#/definitions/User"}

    def test_swagger2_form_parameters(self):
        doc = {"swagger": "2.0", "paths": {}}
        op = {
            "consumes": ["multipart/form-data"],
            "parameters": [
                {"name": "file", "in": "formData", "type": "file", "required": True},
                {"name": "note", "in": "formData", "type": "string"},
            ],
        }
        schema = request_body(doc, op)["content"]["multipart/form-data"]["schema"]
        assert list(schema["properties"]) == ["file", "note"]
        assert schema["required"] == ["file"]

    def test_swagger2_responses_get_content(self):
        doc = load_document(FIXTURES / "swagger2.json")
        result = responses(doc, doc["paths"]["/users"]["get"])
        assert result["200"]["content"]["application/json"]["schema"]["type"] == "array"

    def test_responses_keys_are_strings(self):
        result = responses({"openapi": "3.0.0"}, {"responses": {200: {"description": "OK"}}})
        assert list(result) == ["200"]


class TestSwagger2References:
    DOC = {
        "swagger": "2.0",
        "paths": {
            "/widgets/{id}": {
                "parameters": [{"name": "id", "in": "path", "type": "integer", "required": True}],
            },
        },
        "parameters": {
            "WidgetBody": {
                "name": "body",
                "in": "body",
                "required": True,
                "schema": {"$ref": "#/definitions/Widget"},
            },
            "WidgetId": {"name": "id", "in": "path", "type": "string", "required": True},
        },
        "responses": {
            "NotFound": {
                "description": "Widget not found",
                "schema": {"$ref": "#/definitions/Error"},
                "examples": {"application/json": {"message": "no such widget"}},
            },
        },
        "definitions": {
            "Widget": {"type": "object", "properties": {"code": {"type": "string"}}},
            "Error": {"type": "object", "properties": {"message": {"type": "string"}}},
        },
    }

    def test_response_by_ref(self):
        result = responses(self.DOC, {"responses": {"404": {"$ref": "#/responses/NotFound"}}})
        media = result["404"]["content"]["application/json"]
        assert result["404"]["description"] == "Widget not found"
        assert media["schema"] == {"$ref": "#/definitions/Error"}
        assert media["example"] == {"message": "no such widget"}

    def test_body_parameter_by_ref(self):
        body = request_body(self.DOC, {"parameters": [{"$ref": "#/parameters/WidgetBody"}]})
        assert body["required"] is True
        assert body["content"]["application/json"]["schema"] == {"$ref": "#/definitions/Widget"}

    def test_unresolvable_response_ref_keeps_empty_description(self):
        result = responses(self.DOC, {"responses": {"500": {"$ref": "#/responses/Missing"}}})
        assert result["500"] == {"description": ""}

    def test_ref_parameter_overrides_path_level(self):
        doc = {**self.DOC, "paths": {"/widgets/{id}": {
            **self.DOC["paths"]["/widgets/{id}"],
            "get": {"parameters": [{"$ref": "#/parameters/WidgetId"}], "responses": {}},
        }}}
        endpoint = index_endpoints(doc)[0].endpoints[0]
        params = operation_parameters(doc, endpoint)
        assert params == [{"$ref": "#/parameters/WidgetId"}]
