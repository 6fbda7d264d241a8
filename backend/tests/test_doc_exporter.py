"""
Response Showcase — Documentation Exporter Tests
==================================================

What:  Tests for the OpenAPI document generated from the contract registry.
Why:   The document must advertise exactly the constraints the server
       enforces, and must not change between two exports.
"""

import json

from showcase.schemas import fields as f
from showcase.schemas.fields import ObjectSchema
from showcase.services.doc_exporter import (
    DocumentationExporter,
    field_schema,
    model_schema,
)
from showcase.services.registry import ContractRegistry, ResponseSpec


def resolve(document, schema):
    """Follow a #/components/schemas/... reference (plain or allOf-wrapped)."""
    if "allOf" in schema:
        schema = schema["allOf"][0]
    if "$ref" not in schema:
        return schema
    name = schema["$ref"].rsplit("/", 1)[-1]
    return document["components"]["schemas"][name]


class TestFieldMapping:
    def test_string_constraints(self):
        schema = f.string().min_length(1).max_length(100).describe("ユーザー名", example="太郎").build()
        assert field_schema(schema) == {
            "type": "string",
            "minLength": 1,
            "maxLength": 100,
            "description": "ユーザー名",
            "example": "太郎",
        }

    def test_email_format(self):
        assert field_schema(f.string().email().build()) == {"type": "string", "format": "email"}

    def test_pattern(self):
        assert field_schema(f.string().pattern(r"^\d{3}$").build())["pattern"] == r"^\d{3}$"

    def test_integer_bounds(self):
        assert field_schema(f.integer().min(0).max(150).build()) == {
            "type": "integer",
            "minimum": 0,
            "maximum": 150,
        }

    def test_plain_number(self):
        assert field_schema(f.number().build()) == {"type": "number"}

    def test_boolean(self):
        assert field_schema(f.boolean().build()) == {"type": "boolean"}

    def test_binary(self):
        schema = f.binary().max_size(10).build()
        assert field_schema(schema) == {"type": "string", "format": "binary"}

    def test_falsy_example_kept(self):
        assert field_schema(f.integer().describe("count", example=0).build())["example"] == 0

    def test_free_form_object(self):
        assert field_schema(f.obj().build())["type"] == "object"

    def test_required_list_skips_optional_fields(self):
        schema = ObjectSchema({"a": f.string(), "b": f.string().optional()})
        document, _ = model_schema(schema, "Partial")
        assert document["required"] == ["a"]
        assert "default" not in document["properties"]["b"]

    def test_no_required_key_when_all_optional(self):
        schema = ObjectSchema({"b": f.string().optional()})
        document, _ = model_schema(schema, "AllOptional")
        assert "required" not in document

    def test_properties_carry_declared_names_without_titles(self):
        schema = ObjectSchema({"first-name": f.string()})
        document, _ = model_schema(schema, "Named")
        assert document["title"] == "Named"
        assert document["properties"] == {"first-name": {"type": "string"}}

    def test_nested_object_becomes_component(self):
        schema = ObjectSchema({"data": f.obj({"age": f.integer()})})
        document, definitions = model_schema(schema, "Wrapped")
        assert set(definitions) == {"WrappedData"}
        assert resolve({"components": {"schemas": definitions}}, document["properties"]["data"]) == definitions[
            "WrappedData"
        ]
        assert definitions["WrappedData"]["properties"]["age"] == {"type": "integer"}


class TestExporter:
    def test_empty_registry(self):
        exporter = DocumentationExporter(ContractRegistry(), title="T", version="1")
        assert exporter.export() == {
            "openapi": "3.0.0",
            "info": {"version": "1", "title": "T"},
            "paths": {},
        }

    def test_methods_share_a_path_entry(self):
        registry = ContractRegistry()
        ok = {200: ResponseSpec("ok")}
        registry.register("GET", "/items", responses=ok)
        registry.register("DELETE", "/items", responses=ok)
        paths = DocumentationExporter(registry, title="T", version="1").export()["paths"]
        assert set(paths["/items"]) == {"get", "delete"}
        assert "content" not in paths["/items"]["get"]["responses"]["200"]

    def test_export_is_byte_identical(self, app):
        exporter = app.state.exporter
        assert exporter.export_json() == exporter.export_json()

    def test_japanese_text_not_escaped(self, app):
        assert "ユーザー名".encode("utf-8") in app.state.exporter.export_json()


class TestApplicationDocument:
    def setup_method(self):
        from showcase.main import create_app

        self.document = json.loads(create_app().state.exporter.export_json())

    def test_header(self):
        assert self.document["openapi"] == "3.0.0"
        assert self.document["info"]["version"] == "1.0.0"

    def test_user_request_schema(self):
        operation = self.document["paths"]["/part-05"]["post"]
        assert operation["requestBody"]["required"] is True
        schema = operation["requestBody"]["content"]["application/json"]["schema"]
        assert schema["title"] == "ValidateUserRequest"
        assert schema["required"] == ["name", "email", "age"]
        assert schema["properties"]["name"] == {
            "type": "string",
            "minLength": 1,
            "maxLength": 100,
            "description": "ユーザー名",
            "example": "太郎",
        }
        assert schema["properties"]["email"]["format"] == "email"
        assert schema["properties"]["age"] == {
            "type": "integer",
            "minimum": 0,
            "maximum": 150,
            "description": "年齢",
            "example": 25,
        }

    def test_user_responses(self):
        responses = self.document["paths"]["/part-05"]["post"]["responses"]
        assert list(responses) == ["200", "400"]
        success = responses["200"]["content"]["application/json"]["schema"]
        data = resolve(self.document, success["properties"]["data"])
        assert data["required"] == ["name", "email", "age"]
        assert data["properties"]["age"] == {"type": "integer"}
        error = responses["400"]["content"]["application/json"]["schema"]
        assert error["required"] == ["success", "error"]

    def test_nested_models_listed_in_components(self):
        components = self.document["components"]["schemas"]
        assert "ValidateUserResponse200Data" in components
        assert "UploadFileResponse200FileInfo" in components

    def test_upload_request_schema(self):
        operation = self.document["paths"]["/part-06"]["post"]
        schema = operation["requestBody"]["content"]["multipart/form-data"]["schema"]
        assert schema["properties"]["file"]["format"] == "binary"
        assert schema["required"] == ["file"]
        success = operation["responses"]["200"]["content"]["application/json"]["schema"]
        file_info = resolve(self.document, success["properties"]["fileInfo"])
        assert file_info["required"] == ["name", "size", "type"]
        assert file_info["properties"]["size"] == {"type": "integer"}

    def test_operation_metadata(self):
        operation = self.document["paths"]["/part-06"]["post"]
        assert operation["operationId"] == "upload_file"
        assert operation["tags"] == ["Upload"]

    def test_plain_routes_not_documented(self):
        assert "/part-01" not in self.document["paths"]
        assert "/health" not in self.document["paths"]
