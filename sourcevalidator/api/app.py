"""FastAPI application factory.

Creates the app, registers routers, installs the JSON error envelopes and
wires up lifespan events.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from sourcevalidator.api.deps import init_components, is_initialized
from sourcevalidator.api.models import ValidateResponse
from sourcevalidator.api.routes_health import router as health_router
from sourcevalidator.api.routes_validate import router as validate_router
from sourcevalidator.orchestrator import MISSING_FIELDS_ERROR

logger = logging.getLogger(__name__)

PREFLIGHT_PATHS = {"/validate", "/health"}
PREFLIGHT_METHODS = "GET,OPTIONS,PATCH,DELETE,POST,PUT"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup, log on shutdown."""
    if not is_initialized():
        logger.info("Starting SourceValidator API")
        init_components()
        logger.info("Startup complete")
    yield
    logger.info("Shutting down")


async def _empty_preflight(request: Request, call_next):
    """Answer OPTIONS on the API routes with an empty 200.

    Runs outside CORSMiddleware, whose own preflight reply carries an "OK" body.
    """
    if request.method != "OPTIONS" or request.url.path.rstrip("/") not in PREFLIGHT_PATHS:
        return await call_next(request)
    requested_headers = request.headers.get("access-control-request-headers")
    return Response(
        status_code=200,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Methods": PREFLIGHT_METHODS,
            "Access-Control-Allow-Headers": requested_headers or "*",
            "Access-Control-Max-Age": "600",
        },
    )


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 405:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )
    body = ValidateResponse(
        success=False, message="Method not allowed", error="Method not allowed"
    )
    return JSONResponse(status_code=405, content=body.to_json(), headers=exc.headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    # Only reachable for bodies that are not valid JSON at all
    logger.info("Malformed request body on %s: %s", request.url.path, exc.errors())
    body = ValidateResponse(
        success=False, message="URL and query are required", error=MISSING_FIELDS_ERROR
    )
    return JSONResponse(status_code=400, content=body.to_json())


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="SourceValidator",
        description="Check whether the content behind a link matches a query.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS: any origin may call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it wraps CORSMiddleware
    app.middleware("http")(_empty_preflight)

    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    app.include_router(validate_router)
    app.include_router(health_router)

    return app


app = create_app()
