# Routes package init
"""
Response Showcase — API Routes Package
========================================

Route Inventory:
    - samples.py:    GET  /part-01 … /part-04   (JSON, HTML, CSV, rendered page)
    - validated.py:  POST /part-05              (contract: JSON body)
    - upload.py:     POST /part-06              (contract: multipart body)
    - docs.py:       GET  /doc, /docs           (OpenAPI document + Swagger UI)
    - health.py:     GET  /health
    - dispatch.py:   the generic endpoint behind every contract route

Plain routes use FastAPI's APIRouter; routes with a request body are declared
on a ContractRouter so their schemas are validated and documented.
"""
