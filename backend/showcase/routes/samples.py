"""
Response Showcase — Response Style Samples
============================================

What:  Plain GET routes, one per response style.
Why:   The simplest possible examples of each content type a FastAPI route
       can return; none of them takes a body, so none needs a contract.

Route Inventory:
    GET /part-01   JSON          {"message": "hello"}
    GET /part-02   HTML          static markup
    GET /part-03   CSV           downloadable data.csv
    GET /part-04   HTML          server-rendered page in the shared layout
"""

import random
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates

router = APIRouter(tags=["Samples"])

# layout.html is the shared shell; page templates extend it
TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

PAGE_TITLE = "Response Showcase"

SAMPLE_CSV = '"たいとる","ぼでぃー","あいうえお"\naaa,bbb,ccc'

WELCOME_ITEMS = ("Item 1", "Item 2", "Item 3")


@router.get("/part-01", summary="JSON response")
async def json_sample() -> JSONResponse:
    return JSONResponse({"message": "hello"})


@router.get("/part-02", summary="HTML response", response_class=HTMLResponse)
async def html_sample() -> HTMLResponse:
    return HTMLResponse("<html><body>hello</body></html>")


@router.get("/part-03", summary="CSV download")
async def csv_sample() -> Response:
    """Returns a small CSV file as an attachment named data.csv."""
    return Response(
        content=SAMPLE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="data.csv"'},
    )


@router.get("/part-04", summary="Server-rendered page", response_class=HTMLResponse)
async def rendered_sample(request: Request) -> HTMLResponse:
    """Renders welcome.html (inside layout.html) with a fresh random number (0-999)."""
    return templates.TemplateResponse(
        request,
        "welcome.html",
        {
            "title": PAGE_TITLE,
            "random_number": random.randrange(1000),
            "items": list(WELCOME_ITEMS),
        },
    )
