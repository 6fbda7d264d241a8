"""
Response Showcase — API Documentation Routes
==============================================

What:  GET /doc serves the OpenAPI document generated from the contract
       registry; GET /docs serves a Swagger UI pointed at it.
Why:   FastAPI's built-in /openapi.json knows nothing about contract routes
       (they are mounted with include_in_schema=False), so the registry's
       own exporter is the source of truth. Both routes are read-only.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import HTMLResponse, Response

from showcase.services.doc_exporter import DocumentationExporter

router = APIRouter(tags=["Docs"])

DOC_PATH = "/doc"
VIEWER_PATH = "/docs"


def get_exporter(request: Request) -> DocumentationExporter:
    return request.app.state.exporter


@router.get(DOC_PATH, include_in_schema=False)
async def openapi_document(exporter: DocumentationExporter = Depends(get_exporter)) -> Response:
    return Response(content=exporter.export_json(), media_type="application/json")


@router.get(VIEWER_PATH, include_in_schema=False)
async def swagger_viewer(exporter: DocumentationExporter = Depends(get_exporter)) -> HTMLResponse:
    return get_swagger_ui_html(openapi_url=DOC_PATH, title=f"{exporter.title} - Swagger UI")
