"""Web UI route for the generator page."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from addrgen.api.routes import get_session
from addrgen.generator.session import GeneratorSession

logger = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parent / "web_templates"
templates = Jinja2Templates(directory=str(_TEMPLATE_DIR))

web_router = APIRouter(tags=["web"])


@web_router.get("/", response_class=HTMLResponse)
def index(request: Request, session: GeneratorSession = Depends(get_session)) -> HTMLResponse:
    """Render the page with the current state; the script keeps it live via the JSON API."""
    state = session.snapshot()
    return templates.TemplateResponse(
        request,
        "index.html",
        {"state": state, "state_data": state.model_dump(mode="json")},
    )
