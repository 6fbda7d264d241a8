"""
Response Showcase — Response Contract Registry
================================================

What:  Holds one RouteContract per (method, path): the request schema, the
       response schema for every status the handler may emit, and the handler.
Why:   The same contract drives request validation, response shaping and the
       OpenAPI document, so the three can never drift apart.
How:   Route modules declare contracts on a ContractRouter (the same pattern as
       FastAPI's APIRouter). The application factory builds ONE
       ContractRegistry, includes every router, mounts the routes and freezes
       the registry. The registry is then only ever read.
Who:   Built by create_app(); read by the dispatcher and the docs exporter.
When:  Written at startup only. No request ever mutates it, so concurrent
       reads need no locking.

Startup checks (all raise ContractConfigurationError, aborting startup):
    - the same (method, path) registered twice → DuplicateRouteRegistrationError
    - no 2xx response declared
    - a request body declared without a 400 response to report violations
    - a status outside 100-599, or an unsupported request media type
    - registration after freeze()
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

from showcase.exceptions import (
    ContractConfigurationError,
    DuplicateRouteRegistrationError,
    RouteNotFoundError,
)
from showcase.schemas.fields import ObjectSchema
from showcase.schemas.models import camel_case
from showcase.services.binder import JSON_MEDIA_TYPE, MULTIPART_MEDIA_TYPE

logger = logging.getLogger(__name__)

SUPPORTED_REQUEST_MEDIA_TYPES = (JSON_MEDIA_TYPE, MULTIPART_MEDIA_TYPE)
SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


@dataclass(frozen=True)
class RequestBody:
    """Declared request body: how to decode it and what it must contain."""

    media_type: str
    schema: ObjectSchema
    description: Optional[str] = None


@dataclass(frozen=True)
class ResponseSpec:
    """One possible response of a route. A None schema means an empty body."""

    description: str
    schema: Optional[ObjectSchema] = None
    media_type: str = JSON_MEDIA_TYPE


@dataclass(frozen=True)
class HandlerResult:
    """What a contract handler returns: the status and the unshaped payload."""

    status: int
    body: Mapping[str, Any]


Handler = Callable[[Dict[str, Any], Any], Awaitable[HandlerResult]]


@dataclass(frozen=True)
class RouteContract:
    method: str
    path: str
    responses: Mapping[int, ResponseSpec]
    request: Optional[RequestBody] = None
    handler: Optional[Handler] = field(default=None, compare=False, repr=False)
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[str, str]:
        return self.method, self.path

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"

    @property
    def model_prefix(self) -> str:
        # Handler name when bound ("validate_user" → "ValidateUser"),
        # else derived from the route ("POST /part-05" → "PostPart05")
        if self.handler is not None:
            return camel_case(self.handler.__name__)
        return camel_case(f"{self.method.lower()} {self.path}")

    @property
    def request_model_name(self) -> str:
        """Name of the compiled request model (and its OpenAPI component)."""
        return f"{self.model_prefix}Request"

    def response_model_name(self, status: int) -> str:
        return f"{self.model_prefix}Response{status}"


def normalize_route(method: str, path: str) -> Tuple[str, str]:
    """('post', 'part-05') → ('POST', '/part-05')."""
    if not path.startswith("/"):
        path = "/" + path
    return method.upper(), path


def make_contract(
    method: str,
    path: str,
    request: Optional[RequestBody] = None,
    responses: Optional[Mapping[int, ResponseSpec]] = None,
    *,
    handler: Optional[Handler] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    tags: Sequence[str] = (),
) -> RouteContract:
    """Normalize and freeze the parts of a contract."""
    method, path = normalize_route(method, path)
    return RouteContract(
        method=method,
        path=path,
        request=request,
        responses=MappingProxyType(dict(sorted((responses or {}).items(), key=lambda item: str(item[0])))),
        handler=handler,
        summary=summary,
        description=description,
        tags=tuple(tags),
    )


def check_contract(contract: RouteContract) -> None:
    """
    Reject contracts that could not be documented or dispatched faithfully.

    Raises:
        ContractConfigurationError with the route label in the context.
    """
    ctx = {"route": contract.label}
    if contract.method not in SUPPORTED_METHODS:
        raise ContractConfigurationError(
            message=f"{contract.label}: unsupported method", context=ctx
        )
    for status in contract.responses:
        if not isinstance(status, int) or not 100 <= status <= 599:
            raise ContractConfigurationError(
                message=f"{contract.label}: invalid response status {status!r}", context=ctx
            )
    if not any(200 <= status < 300 for status in contract.responses):
        raise ContractConfigurationError(
            message=f"{contract.label}: no success (2xx) response declared", context=ctx
        )
    if contract.request is not None:
        if contract.request.media_type not in SUPPORTED_REQUEST_MEDIA_TYPES:
            raise ContractConfigurationError(
                message=(
                    f"{contract.label}: unsupported request media type "
                    f"{contract.request.media_type!r}"
                ),
                context=ctx,
            )
        if 400 not in contract.responses:
            raise ContractConfigurationError(
                message=f"{contract.label}: request body declared but no 400 response",
                context=ctx,
            )


class ContractRouter:
    """
    Collects contract declarations in a route module.

    Usage:
        router = ContractRouter(tags=["Upload"])

        @router.contract("POST", "/part-06", request=..., responses={...})
        async def upload_file(values, ctx) -> HandlerResult:
            ...

    Declaring a contract here does NOT register it anywhere; the application
    factory includes the router into its registry.
    """

    def __init__(self, tags: Optional[Sequence[str]] = None):
        self.tags = list(tags or [])
        self.contracts: List[RouteContract] = []

    def contract(
        self,
        method: str,
        path: str,
        *,
        responses: Mapping[int, ResponseSpec],
        request: Optional[RequestBody] = None,
        summary: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
    ) -> Callable[[Handler], Handler]:
        def decorator(handler: Handler) -> Handler:
            self.contracts.append(
                make_contract(
                    method,
                    path,
                    request,
                    responses,
                    handler=handler,
                    summary=summary,
                    description=description or (handler.__doc__ or "").strip() or None,
                    tags=tags if tags is not None else self.tags,
                )
            )
            return handler

        return decorator


class ContractRegistry:
    """
    The set of route contracts served by one application instance.

    Not a module-level singleton: each create_app() call builds its own and
    exposes it as app.state.registry.
    """

    def __init__(self) -> None:
        self._contracts: Dict[Tuple[str, str], RouteContract] = {}
        self._frozen = False

    def register(
        self,
        method: str,
        path: str,
        request: Optional[RequestBody] = None,
        responses: Optional[Mapping[int, ResponseSpec]] = None,
        **options: Any,
    ) -> RouteContract:
        """Build, check and store one contract. Returns the stored contract."""
        return self.add(make_contract(method, path, request, responses, **options))

    def add(self, contract: RouteContract) -> RouteContract:
        if self._frozen:
            raise ContractConfigurationError(
                message=f"{contract.label}: registry is frozen; register routes before startup",
                context={"route": contract.label},
            )
        if contract.key in self._contracts:
            raise DuplicateRouteRegistrationError(contract.method, contract.path)
        check_contract(contract)
        self._contracts[contract.key] = contract
        logger.debug("Registered contract %s", contract.label)
        return contract

    def include(self, router: ContractRouter) -> None:
        for contract in router.contracts:
            self.add(contract)

    def lookup(self, method: str, path: str) -> RouteContract:
        """
        Return the contract for (method, path).

        Raises:
            RouteNotFoundError: nothing registered under that pair.
        """
        key = normalize_route(method, path)
        try:
            return self._contracts[key]
        except KeyError:
            raise RouteNotFoundError(*key) from None

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[RouteContract]:
        return iter(list(self._contracts.values()))

    def __len__(self) -> int:
        return len(self._contracts)

    def __contains__(self, key: object) -> bool:
        return key in self._contracts
