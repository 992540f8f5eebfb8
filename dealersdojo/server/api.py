"""FastAPI application definition"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from ..core.errors import ConfigError, ExternalModelError, ValidationError
from .relay import ChatRelay

logger = logging.getLogger(__name__)

CHAT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    relay: ChatRelay,
    *,
    catalog_path: Optional[Path] = None,
    static_dir: Optional[Path] = None,
) -> FastAPI:
    """Build the FastAPI instance around ``relay``."""
    app = FastAPI(title="Dealer's Dojo Relay", version="1.0.0")
    app.state.relay = relay

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error(_: Request, exc: ValidationError):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error(_: Request, exc: ConfigError):
        logger.error("Relay misconfigured: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(ExternalModelError)
    async def model_error(_: Request, exc: ExternalModelError):
        logger.error("AI API error: %s (%s)", exc, exc.details)
        content = {"error": str(exc)}
        if exc.details:
            content["details"] = exc.details
        return JSONResponse(status_code=500, content=content)

    @app.get("/api/ping")
    async def ping():
        return {"status": "ok", "provider": relay.provider.name}

    @app.api_route("/api/chat", methods=CHAT_METHODS)
    async def chat(request: Request):
        relay.ensure_configured()
        if request.method != "POST":
            raise ValidationError("Method Not Allowed", status_code=405)
        try:
            body = await request.json()
        except ValueError as exc:
            raise ValidationError("Request body must be valid JSON.") from exc

        system_prompt, history, user_message = relay.parse_request(body)
        reply = await run_in_threadpool(relay.relay, system_prompt, history, user_message)
        return reply.model_dump()

    if catalog_path is not None:

        @app.get("/levels.json")
        async def levels():
            if not catalog_path.exists():
                raise HTTPException(status_code=404, detail="levels.json not found")
            return FileResponse(catalog_path, media_type="application/json")

    if static_dir and static_dir.exists():
        app.mount(
            "/web",
            StaticFiles(directory=static_dir, html=True),
            name="web",
        )

        @app.get("/")
        async def root():
            index_file = static_dir / "index.html"
            if not index_file.exists():
                raise HTTPException(status_code=404, detail="index.html not found")
            return FileResponse(index_file)

    return app
