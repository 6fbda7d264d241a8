"""
Response Showcase — Documentation Exporter
============================================

What:  Turns the contract registry into an OpenAPI 3.0 document.
Why:   The docs are generated from the very models that validate requests,
       so what /doc advertises is exactly what the server enforces.
How:   Walks the registry in registration order. Each request / response
       schema is compiled to its pydantic model (schemas/models.py) under the
       contract's model name, and pydantic's model_json_schema() produces
       the schema object. Nested models come back as $defs; they are hoisted
       into components.schemas and referenced with #/components/schemas/...
       Output is deterministic: exporting twice with no registration in
       between yields byte-identical JSON.
Who:   Served by routes/docs.py at GET /doc and rendered by Swagger UI at
       GET /docs.

Field mapping (what the compiled models produce):
    STRING   → {"type": "string", minLength, maxLength, format: email, pattern}
    NUMBER   → {"type": "number" | "integer", minimum, maximum}
    BOOLEAN  → {"type": "boolean"}
    BINARY   → {"type": "string", "format": "binary"}
    OBJECT   → $ref to the nested model, or a free-form {"type": "object"}
"""

import json
from typing import Any, Dict, Optional, Tuple

from pydantic.json_schema import GenerateJsonSchema

from showcase.schemas.fields import FieldSchema, ObjectSchema
from showcase.schemas.models import FIELD_WRAPPER_KEY, compile_field, compile_object
from showcase.services.registry import ContractRegistry, RouteContract

OPENAPI_VERSION = "3.0.0"
REF_TEMPLATE = "#/components/schemas/{model}"


class OpenAPISchemaGenerator(GenerateJsonSchema):
    """pydantic's generator without per-property titles (field_0, field_1, ...)."""

    def field_title_should_be_set(self, schema) -> bool:
        return False


def model_schema(schema: ObjectSchema, name: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    JSON Schema for one ObjectSchema compiled under `name`.

    Returns:
        (schema object, definitions of nested models to put in components)
    """
    document = compile_object(schema, name).model_json_schema(
        by_alias=True,
        ref_template=REF_TEMPLATE,
        schema_generator=OpenAPISchemaGenerator,
        mode="validation",
    )
    definitions = document.pop("$defs", {})
    return document, definitions


def field_schema(field: FieldSchema) -> Dict[str, Any]:
    """JSON Schema of a single declared field (as it appears under properties)."""
    model, _ = compile_field(field)
    document = model.model_json_schema(
        by_alias=True,
        ref_template=REF_TEMPLATE,
        schema_generator=OpenAPISchemaGenerator,
    )
    return document["properties"][FIELD_WRAPPER_KEY]


def operation_to_openapi(contract: RouteContract, components: Dict[str, Any]) -> Dict[str, Any]:
    """
    One OpenAPI operation object. Nested model definitions are added to
    `components` as a side effect.
    """
    operation: Dict[str, Any] = {}
    if contract.tags:
        operation["tags"] = list(contract.tags)
    if contract.summary:
        operation["summary"] = contract.summary
    if contract.description:
        operation["description"] = contract.description
    if contract.handler is not None:
        operation["operationId"] = contract.handler.__name__

    if contract.request is not None:
        schema, definitions = model_schema(contract.request.schema, contract.request_model_name)
        components.update(definitions)
        request_body: Dict[str, Any] = {
            "required": True,
            "content": {contract.request.media_type: {"schema": schema}},
        }
        if contract.request.description:
            request_body["description"] = contract.request.description
        operation["requestBody"] = request_body

    responses: Dict[str, Any] = {}
    for status, spec in contract.responses.items():
        response: Dict[str, Any] = {"description": spec.description}
        if spec.schema is not None:
            schema, definitions = model_schema(spec.schema, contract.response_model_name(status))
            components.update(definitions)
            response["content"] = {spec.media_type: {"schema": schema}}
        responses[str(status)] = response
    operation["responses"] = responses
    return operation


class DocumentationExporter:
    """
    Read-only view of a registry as an OpenAPI document.

    Safe to call concurrently with request handling: it never writes to the
    registry and builds a fresh dict on every call.
    """

    def __init__(
        self,
        registry: ContractRegistry,
        *,
        title: str,
        version: str,
        description: Optional[str] = None,
    ):
        self.registry = registry
        self.title = title
        self.version = version
        self.description = description

    def export(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {"version": self.version, "title": self.title}
        if self.description:
            info["description"] = self.description

        paths: Dict[str, Dict[str, Any]] = {}
        components: Dict[str, Any] = {}
        for contract in self.registry:
            paths.setdefault(contract.path, {})[contract.method.lower()] = operation_to_openapi(
                contract, components
            )

        document: Dict[str, Any] = {"openapi": OPENAPI_VERSION, "info": info, "paths": paths}
        if components:
            document["components"] = {"schemas": components}
        return document

    def export_json(self) -> bytes:
        """The document as UTF-8 JSON bytes (non-ASCII kept readable)."""
        return json.dumps(self.export(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")
