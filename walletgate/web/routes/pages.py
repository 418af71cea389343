"""Public pages: liveness text and the wallet signer page."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "templates"))


@router.get("/", response_class=PlainTextResponse)
async def alive() -> str:
    return "walletgate is alive"


@router.get("/signer", response_class=HTMLResponse)
async def signer_page(
    request: Request,
    msg: str = Query(default="", max_length=512),
    requester: str = Query(default="", max_length=64),
) -> HTMLResponse:
    """Render the page that asks the browser wallet to sign ``msg``."""
    return templates.TemplateResponse(
        request,
        "signer.html",
        {"message": msg, "requester_id": requester},
    )
