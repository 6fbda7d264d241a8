"""
Response Showcase — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for request and startup errors.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes, and keep contract mistakes from ever reaching a client
       as a raw stack trace.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch the per-request
       ones and return structured JSON error responses.
Who:   Raised by the binder, the registry and the contract dispatcher.

Exception Hierarchy:
    ShowcaseError (base)
    ├── ValidationError                    → 400 Bad Request (error envelope)
    │   └── BodyUnparseableError           → 400 Bad Request (error envelope)
    ├── PayloadTooLargeError               → 413 Payload Too Large
    ├── RouteNotFoundError                 → 404 Not Found
    ├── ContractViolationError             → 500 Internal Server Error
    └── ContractConfigurationError         → fatal at startup (never handled)
        └── DuplicateRouteRegistrationError

Startup vs. request errors:
    ContractConfigurationError is raised while the application factory builds
    the registry. It is deliberately NOT mapped to a response: it propagates
    out of create_app(), so uvicorn never starts serving a half-wired app.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from showcase.schemas.validation import Violation


class ShowcaseError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ShowcaseError):
    """
    Raised when a request body fails its route's request schema.

    What:    Carries every field-level violation found in the request.
    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "error": "バリデーションエラー",
            "details": {
                "formErrors": [],
                "fieldErrors": {"age": ["Input should be less than or equal to 150"]},
                "issues": [{"path": "age", "code": "OutOfRange", "message": "Input should be less than or equal to 150"}]
            }
        }
    """

    def __init__(
        self,
        violations: Sequence["Violation"],
        message: str = "バリデーションエラー",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.violations: List["Violation"] = list(violations)


class BodyUnparseableError(ValidationError):
    """
    Raised by the request binder when the body cannot be decoded at all.

    When:    Malformed JSON, non-object JSON, wrong content type, broken
             multipart framing.
    HTTP:    400 Bad Request (a single body-level violation, no field detail)
    """

    def __init__(self, reason: str, context: Optional[Dict[str, Any]] = None):
        from showcase.schemas.validation import Violation, ViolationCode

        super().__init__(
            violations=[Violation(path="", code=ViolationCode.BODY_UNPARSEABLE, reason=reason)],
            context=context,
        )
        self.reason = reason

    def __str__(self) -> str:
        # message is the generic envelope text; logs and tracebacks need the cause
        return f"{self.message}: {self.reason}"


class PayloadTooLargeError(ShowcaseError):
    """
    Raised by the binder when a request body exceeds the configured limit.

    When:    Content-Length above the limit (rejected before reading), or a
             streamed body that crosses the limit while being received.
    HTTP:    413 Payload Too Large
    """

    def __init__(self, received: int, limit: int):
        super().__init__(
            message=f"Request body exceeds the {limit} byte limit",
            context={"received": received, "limit": limit},
        )
        self.received = received
        self.limit = limit


class RouteNotFoundError(ShowcaseError):
    """
    Raised when no contract is registered for a (method, path) pair.

    HTTP:    404 Not Found
    """

    def __init__(self, method: str, path: str):
        super().__init__(
            message=f"No contract registered for {method} {path}",
            context={"method": method, "path": path},
        )
        self.method = method
        self.path = path


class ContractViolationError(ShowcaseError):
    """
    Raised when a handler's result does not fit its own route contract.

    When:    The handler emitted a status with no declared response schema,
             or its payload is missing a required field / has the wrong kind.
    HTTP:    500 Internal Server Error (it is our bug, not the client's)
    """

    def __init__(
        self,
        message: str = "Response does not match the route contract",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ContractConfigurationError(ShowcaseError):
    """
    Raised while building the contract registry at startup.

    When:    Inconsistent contract (request body without a 400 response, no
             success response), or registration after the registry was frozen.
    Recovery: None. The application factory lets this propagate.
    """

    def __init__(
        self,
        message: str = "Invalid route contract configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateRouteRegistrationError(ContractConfigurationError):
    """Raised when the same (method, path) pair is registered twice."""

    def __init__(self, method: str, path: str):
        super().__init__(
            message=f"Route {method} {path} is already registered",
            context={"method": method, "path": path},
        )
        self.method = method
        self.path = path
