"""
Response Showcase — Pydantic Envelope Models
==============================================

What:  Pydantic models for the responses that are NOT driven by a route
       contract: the validation error envelope, generic error bodies and the
       health check.
Why:   These shapes are shared by every route, so they are fixed models
       rather than per-route ObjectSchemas.
How:   Handlers build a model and return model_dump(exclude_none=True), so
       optional members (e.g. `details`) are omitted instead of sent as null.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ViolationIssue(BaseModel):
    """One violation with its machine-readable code."""
    path: str = Field(description="Dotted field path; empty for body-level problems")
    code: str = Field(description="Violation code, e.g. MissingField, OutOfRange")
    message: str = Field(description="Human-readable reason")


class ErrorDetails(BaseModel):
    """
    Structured violation list attached to a 400 envelope.

    Example:
        {
            "formErrors": [],
            "fieldErrors": {"age": ["Input should be a valid integer"]},
            "issues": [{"path": "age", "code": "TypeMismatch", "message": "Input should be a valid integer"}]
        }
    """
    formErrors: List[str] = Field(default_factory=list)
    fieldErrors: Dict[str, List[str]] = Field(default_factory=dict)
    issues: List[ViolationIssue] = Field(default_factory=list)


class ErrorEnvelope(BaseModel):
    """
    What:  Uniform body for every validation failure (always HTTP 400).
    Why:   Clients can branch on `success` without looking at the status code.
    """
    success: bool = Field(default=False)
    error: str = Field(description="Human-readable summary of the failure")
    details: Optional[ErrorDetails] = Field(
        default=None,
        description="Per-field violations; omitted when the summary says it all",
    )


class ErrorResponse(BaseModel):
    """
    Error format for non-validation failures (404, 500).

    Fields:
        error: Machine-readable error code (e.g. "not_found", "server_error")
        message: Human-readable description
        request_id: Correlation ID for tracing this error in server logs
    """
    success: bool = Field(default=False)
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for uptime monitoring."""
    status: str = Field(description="Overall service status: healthy")
    version: str = Field(description="Application version")
    routes: int = Field(description="Number of registered route contracts")
    uptime_seconds: float = Field(description="Seconds since service started")
