"""
FastAPI/ASGI app for serving the funding assistant over streamable HTTP.

- MCP endpoint under /mcp (optional bearer token)
- CORS for the configured origins
- /health, /config and /metrics (public)
"""
from __future__ import annotations

import hmac
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .config import Settings, is_production_env, load_settings
from .context import AppContext
from .server import create_server

logger = logging.getLogger("funding_assistant.http_app")

MCP_PATH = "/mcp"


class BearerTokenAuthMiddleware(BaseHTTPMiddleware):
    """Requires ``Authorization: Bearer <token>`` on /mcp when a token is configured."""

    def __init__(self, app: ASGIApp, expected_token: str = "") -> None:
        super().__init__(app)
        self.expected_token = expected_token

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if not self.expected_token or not path.startswith(MCP_PATH) or request.method == "OPTIONS":
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer "):
            logger.warning(f"[Auth] Missing or invalid Authorization header for {request.method} {path}")
            return JSONResponse(
                {"error": "unauthorized", "message": "Missing or invalid Authorization header"},
                status_code=status.HTTP_401_UNAUTHORIZED,
                headers={"WWW-Authenticate": "Bearer"},
            )

        token = auth_header[len("Bearer "):]
        if not hmac.compare_digest(token, self.expected_token):
            logger.warning(f"[Auth] Invalid token for {request.method} {path}")
            return JSONResponse(
                {"error": "unauthorized", "message": "Invalid token"},
                status_code=status.HTTP_401_UNAUTHORIZED,
                headers={"WWW-Authenticate": "Bearer"},
            )
        return await call_next(request)


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    settings = settings or (context.settings if context else load_settings())
    server_cfg = settings.server
    if is_production_env() and not server_cfg.auth_token:
        raise RuntimeError(
            "MCP_SERVER_TOKEN is required in production. "
            "Set MCP_SERVER_TOKEN environment variable before starting the HTTP server."
        )

    app_ctx = context or AppContext(settings)
    mcp = create_server(settings, context=app_ctx)
    mcp_app = mcp.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Mounted apps do not get their own lifespan; run the MCP session manager here.
        async with mcp.session_manager.run():
            logger.info(f"MCP endpoint ready at {MCP_PATH}")
            yield

    app = FastAPI(
        title=server_cfg.title,
        description="MCP server for funding options and document checklists",
        version=server_cfg.version,
        lifespan=lifespan,
    )
    app.add_middleware(BearerTokenAuthMiddleware, expected_token=server_cfg.auth_token)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(server_cfg.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Mcp-Session-Id", "Mcp-Protocol-Version"],
        expose_headers=["Mcp-Session-Id"],
    )

    @app.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "transport": "streamable-http",
            "version": server_cfg.version,
        }

    @app.get("/config")
    async def config() -> dict[str, Any]:
        return {
            "server": {
                "name": server_cfg.name,
                "version": server_cfg.version,
                "transport": "streamable-http",
            },
            "configuration": {
                "allowedOrigins": list(server_cfg.allowed_origins),
                "authRequired": bool(server_cfg.auth_token),
                "apiBaseUrl": settings.api.base_url,
                "apiKeyConfigured": bool(settings.api.api_key),
                "port": server_cfg.port,
            },
            "endpoints": {
                "health": "/health",
                "config": "/config",
                "metrics": "/metrics",
                "mcp": MCP_PATH,
                "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        return PlainTextResponse(app_ctx.metrics.to_prometheus(), media_type="text/plain; version=0.0.4")

    # FastMCP serves its endpoint at /mcp inside this app.
    app.mount("/", mcp_app)
    return app
