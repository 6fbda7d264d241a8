# Schemas package init
"""
Response Showcase — Schemas Package
=====================================

What:  Everything that describes the shape of data crossing the API boundary.

Module Inventory:
    - fields.py:      FieldKind, FieldSchema builder, ObjectSchema
    - models.py:      Compiles ObjectSchema declarations to pydantic models
    - validation.py:  The validation engine (Valid / Invalid / Violation)
    - envelope.py:    Pydantic models for error envelopes and health checks
"""
