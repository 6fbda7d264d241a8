"""
Response Showcase — Application Package Initializer
====================================================

What: Marks the `showcase` directory as a Python package.
Why:  Enables module imports like `from showcase.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend follows the same layered layout as any of our FastAPI services:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, contract dispatch
    ├─────────────────────────────────────┤
    │   Services (Binder, Registry, Docs) │  ← Decoding, contracts, OpenAPI export
    ├─────────────────────────────────────┤
    │      Schemas (Validation Engine)    │  ← Field rules + Pydantic envelopes
    └─────────────────────────────────────┘

    There is no persistence layer: every route is a stateless handler and the
    only shared object is the contract registry, built once at startup.
"""

__version__ = "1.0.0"
