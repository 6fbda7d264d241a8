"""
Response Showcase — Contract Dispatcher
=========================================

What:  The single generic endpoint behind every contract route.
Why:   Binding, validation and response shaping are identical for all
       contract routes; handlers only contain the route's own logic.
How:   For each registered contract, mount_contracts() adds a FastAPI route
       whose endpoint runs:

           lookup(method, path)          registry read, no per-route closure state
           → read_body(...)              receive at most settings.max_body_size
           → bind_body(...)              decode JSON / multipart
           → validate_object(...)        collect every violation
           → handler(values, ctx)        route logic
           → shape(response schema)      enforce the declared response contract

Failure model:
    - Invalid request → ValidationError → 400 envelope (global handler)
    - Oversized body → PayloadTooLargeError → 413
    - Undeclared status or malformed handler payload → ContractViolationError → 500
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Dict

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from showcase.config import settings
from showcase.exceptions import ContractConfigurationError, ContractViolationError, ValidationError
from showcase.middleware.request_id import request_id_var
from showcase.schemas import fields as f
from showcase.schemas.fields import ObjectSchema
from showcase.schemas.validation import shape, validate_object
from showcase.services.binder import bind_body, read_body
from showcase.services.registry import (
    ContractRegistry,
    HandlerResult,
    ResponseSpec,
    RouteContract,
)

logger = logging.getLogger(__name__)


# ── Shared response declarations ─────────────────────────────────────────
# Every route with a request body answers validation failures with this
ERROR_ENVELOPE_SCHEMA = ObjectSchema({
    "success": f.boolean(),
    "error": f.string(),
    "details": f.obj().optional().describe("Violations grouped by field"),
})

VALIDATION_ERROR_RESPONSE = ResponseSpec(
    description="バリデーションエラー",
    schema=ERROR_ENVELOPE_SCHEMA,
)


@dataclass(frozen=True)
class ContractContext:
    """Per-request context handed to contract handlers."""

    contract: RouteContract
    registry: ContractRegistry
    request_id: str


def get_registry(request: Request) -> ContractRegistry:
    """FastAPI dependency: the registry built by the application factory."""
    return request.app.state.registry


async def dispatch(request: Request, contract: RouteContract, registry: ContractRegistry) -> Response:
    """Run one request through its contract. See module docstring for the pipeline."""
    ctx = ContractContext(contract=contract, registry=registry, request_id=request_id_var.get(""))

    if contract.request is None:
        outcome = await contract.handler({}, ctx)
        return render_outcome(contract, outcome)

    body = await read_body(
        request.stream(),
        request.headers.get("content-length"),
        settings.max_body_size,
    )
    async with bind_body(
        contract.request.media_type,
        request.headers.get("content-type"),
        body,
    ) as raw_values:
        result = validate_object(contract.request.schema, raw_values, name=contract.request_model_name)
        if not result.ok:
            raise ValidationError(result.violations, context={"route": contract.label})
        outcome = await contract.handler(result.value, ctx)

    return render_outcome(contract, outcome)


def render_outcome(contract: RouteContract, outcome: HandlerResult) -> Response:
    """
    Turn a handler result into a response that honours the contract.

    Raises:
        ContractViolationError: status not declared, or body does not match
            the schema declared for that status.
    """
    spec = contract.responses.get(outcome.status)
    if spec is None:
        raise ContractViolationError(
            message=f"{contract.label} emitted undeclared status {outcome.status}",
            context={"route": contract.label, "status": outcome.status},
        )
    if spec.schema is None:
        return Response(status_code=outcome.status)
    body = shape(spec.schema, outcome.body, name=contract.response_model_name(outcome.status))
    return JSONResponse(status_code=outcome.status, content=body)


def make_endpoint(
    method: str, path: str
) -> Callable[..., Coroutine[Any, Any, Response]]:
    async def endpoint(
        request: Request,
        registry: ContractRegistry = Depends(get_registry),
    ) -> Response:
        contract = registry.lookup(method, path)
        return await dispatch(request, contract, registry)

    return endpoint


def mount_contracts(app: FastAPI, registry: ContractRegistry) -> None:
    """
    Add one FastAPI route per contract, then freeze the registry.

    Raises:
        ContractConfigurationError: a contract has no handler.
    """
    for contract in registry:
        if contract.handler is None:
            raise ContractConfigurationError(
                message=f"{contract.label}: no handler bound to contract",
                context={"route": contract.label},
            )
        app.add_api_route(
            contract.path,
            make_endpoint(contract.method, contract.path),
            methods=[contract.method],
            name=contract.handler.__name__,
            include_in_schema=False,
        )
    registry.freeze()
    logger.info("Mounted %d contract route(s)", len(registry))


def ok(body: Dict[str, Any], status: int = 200) -> HandlerResult:
    """Shorthand for handlers: HandlerResult with a success status."""
    return HandlerResult(status=status, body=body)
