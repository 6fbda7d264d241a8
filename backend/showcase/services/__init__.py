# Services package init
"""
Response Showcase — Services Layer
====================================

What:  Logic sitting between routes (HTTP) and schemas (data shapes).
Why:   Separation of concerns — routes handle HTTP, services decode bodies,
       hold contracts and build documents.

Service Inventory:
    - binder.py:        Request body decoding (JSON / multipart) → raw values
    - registry.py:      RouteContract, ContractRouter, ContractRegistry
    - doc_exporter.py:  OpenAPI document generation from the registry
"""
