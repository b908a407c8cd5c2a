"""FastAPI web application for ProLibrary."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any

import structlog
import uvicorn
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from ..core.catalog import CatalogController
from ..core.config import Settings
from ..core.store import RemoteTable

load_dotenv()

log = structlog.get_logger()

STATIC_DIR = Path(__file__).parent / "static"
VERSION = "2.0.0"


class SearchBody(BaseModel):
    term: str = ""


class DraftBody(BaseModel):
    title: str | None = None
    author: str | None = None
    isbn: str | None = None


class ToggleBody(BaseModel):
    status: str


def get_controller(request: Request) -> CatalogController:
    return request.app.state.controller


Controller = Annotated[CatalogController, Depends(get_controller)]


def _view(controller: CatalogController) -> dict[str, Any]:
    state = controller.state
    return {
        "loading": state.loading,
        "search_term": state.search_term,
        "books": [b.to_dict() for b in controller.filtered_view()],
        "total": len(state.books),
        "create_form_open": state.create_form_open,
        "draft": state.draft.to_dict(),
        "error": state.error,
        "form_error": state.form_error,
    }


def create_app(settings: Settings | None = None, table: Any = None) -> FastAPI:
    """Build the app; ``table`` replaces the remote client (used by tests)."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        remote = table if table is not None else RemoteTable(settings)
        controller = CatalogController(remote, settings)
        app.state.controller = controller
        await controller.start()
        log.info("catalog_ready", books=len(controller.state.books))
        try:
            yield
        finally:
            controller.close()
            if table is None:
                await remote.aclose()

    app = FastAPI(title="ProLibrary", docs_url=None, redoc_url=None, lifespan=lifespan)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.get("/health")
    async def health(controller: Controller):
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": VERSION,
            "environment": os.environ.get("ENV", "dev"),
            "books": len(controller.state.books),
        }

    @app.get("/", response_class=HTMLResponse)
    async def index():
        return (STATIC_DIR / "index.html").read_text(encoding="utf-8")

    @app.get("/api/state")
    async def state(controller: Controller):
        return _view(controller)

    @app.put("/api/search")
    async def search(body: SearchBody, controller: Controller):
        controller.set_search_term(body.term)
        return _view(controller)

    @app.put("/api/draft")
    async def draft(body: DraftBody, controller: Controller):
        controller.update_draft(**body.model_dump(exclude_none=True))
        return _view(controller)

    @app.post("/api/form/open")
    async def open_form(controller: Controller):
        controller.open_create_form()
        return _view(controller)

    @app.post("/api/form/close")
    async def close_form(controller: Controller):
        controller.close_create_form()
        return _view(controller)

    @app.post("/api/error/dismiss")
    async def dismiss_error(controller: Controller):
        controller.dismiss_error()
        return _view(controller)

    @app.post("/api/books/refresh")
    async def refresh(controller: Controller):
        if not await controller.refresh():
            return JSONResponse(_view(controller), status_code=502)
        return _view(controller)

    @app.post("/api/books")
    async def create_book(controller: Controller, body: DraftBody | None = None):
        if body is not None:
            fields = body.model_dump(exclude_none=True)
            if fields:
                controller.update_draft(**fields)

        complete = controller.state.draft.is_complete()
        if not await controller.create():
            if not complete:
                return JSONResponse(
                    {**_view(controller), "error": controller.state.form_error},
                    status_code=422,
                )
            return JSONResponse(
                {**_view(controller), "error": controller.state.error}, status_code=502
            )
        return _view(controller)

    @app.post("/api/books/{book_id}/toggle")
    async def toggle(book_id: str, body: ToggleBody, controller: Controller):
        if not await controller.toggle_status(book_id, body.status):
            return JSONResponse(_view(controller), status_code=502)
        return _view(controller)

    @app.delete("/api/books/{book_id}")
    async def delete_book(book_id: str, controller: Controller, confirm: bool = False):
        deleted = await controller.remove(book_id, confirm=lambda: confirm)
        if confirm and not deleted:
            return JSONResponse(
                {**_view(controller), "deleted": False},
                status_code=502,
            )
        return {**_view(controller), "deleted": deleted}

    return app


app = create_app()


def main():
    port = int(os.environ.get("PORT", "8000"))
    is_dev = os.environ.get("ENV", "dev") == "dev"
    uvicorn.run(
        "prolibrary.web.app:app",
        host="0.0.0.0",
        port=port,
        reload=is_dev,
    )
