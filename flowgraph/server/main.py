"""
flowgraph FastAPI server.

Start with:
    python -m flowgraph.server.main

Or via uvicorn directly:
    uvicorn flowgraph.server.main:app --port 3001 --reload
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flowgraph.compiler.errors import ConfigurationError, GenerationError, ValidationError
from flowgraph.config import Settings, load_settings
from flowgraph.log import configure_logging
from flowgraph.server.routes.generate_routes import router

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to generate code"


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Service misconfigured on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE})


async def _generation_error(request: Request, exc: GenerationError) -> JSONResponse:
    logger.error("Generation failed on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE})


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE})


# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="flowgraph API", version="1.0.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(ConfigurationError, _configuration_error)
    app.add_exception_handler(GenerationError, _generation_error)
    app.add_exception_handler(HTTPException, _http_error)
    app.add_exception_handler(Exception, _unexpected_error)

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "strategy": settings.strategy}

    return app


app = create_app()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    configure_logging(app.state.settings.log_level)
    uvicorn.run(
        "flowgraph.server.main:app",
        host="0.0.0.0",
        port=3001,
        reload=True,
    )
