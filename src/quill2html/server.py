"""FastAPI web service for Delta to HTML rendering.

Endpoints::

    POST /render        Send a Delta JSON body, receive HTML.
    POST /render/file   Upload a .json Delta file, receive HTML.
    GET  /health        Health check.
    GET  /presets       List available rendering presets.

Run::

    uvicorn quill2html.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

from fastapi import FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import HTMLResponse

from quill2html import __version__
from quill2html.converter import Converter
from quill2html.errors import DecodeError, RenderError
from quill2html.options import PRESETS

app = FastAPI(
    title="quill2html",
    description="Quill Delta to HTML rendering service",
    version=__version__,
)


def _render(data: bytes, preset: str) -> HTMLResponse:
    try:
        converter = Converter(preset=preset)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        html = converter.convert_bytes(data)
    except DecodeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RenderError as exc:
        raise HTTPException(
            status_code=422,
            detail={
                "error": str(exc),
                "index": exc.index,
                "html": exc.html.decode("utf-8"),
            },
        ) from exc

    return HTMLResponse(content=html.decode("utf-8"))


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/presets")
async def list_presets() -> dict[str, list[str]]:
    """List available rendering presets."""
    return {"presets": PRESETS}


@app.post("/render", response_class=HTMLResponse)
async def render_delta(
    request: Request,
    preset: str = Query("default"),
) -> HTMLResponse:
    """Send a Delta JSON array (or ``{"ops": [...]}``) and receive HTML.

    - **preset**: Rendering preset name (default, quill, strict)
    """
    raw = await request.body()
    return _render(raw, preset)


@app.post("/render/file", response_class=HTMLResponse)
async def render_file(
    file: UploadFile = File(...),
    preset: str = Form("default"),
) -> HTMLResponse:
    """Upload a Delta JSON file and receive HTML back.

    - **file**: Delta file (.json)
    - **preset**: Rendering preset name
    """
    raw = await file.read()
    return _render(raw, preset)
