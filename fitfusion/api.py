# -*- coding: utf-8 -*-
"""
FitFusion API

Diet plans, cart/orders, product catalog and AI suggestions.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .app_db import init_app_db
from .auth.security import get_current_user_from_request
from .catalog.api import inventory_router, router as products_router
from .config import settings
from .diet_plans.api import router as diet_plans_router
from .errors import AppError, InternalError, error_payload
from .orders.api import router as orders_router
from .suggestions.api import router as suggestions_router

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="FitFusion API",
    description="Diet plans, cart/orders, product catalog and AI suggestions",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def _startup_init_db() -> None:
    init_app_db(settings.db_path)


# Ensure the app DB exists even when lifespan events are not triggered (e.g. some test clients).
init_app_db(settings.db_path)


_AUTH_EXEMPT_PREFIXES = (
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
)

_HTTP_ERROR_KINDS = {
    400: "validation_error",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


@app.middleware("http")
async def _auth_gate(request: Request, call_next):
    path = request.url.path
    gated = request.method != "OPTIONS" and path.startswith("/api") and path != "/api/health"
    if gated and not any(path.startswith(p) for p in _AUTH_EXEMPT_PREFIXES):
        try:
            get_current_user_from_request(request)
        except AppError as exc:
            return JSONResponse(status_code=exc.http_status, content=error_payload(exc.kind, exc.message))
    return await call_next(request)


@app.middleware("http")
async def _internal_errors(request: Request, call_next):
    # Registered last, so it wraps everything else.
    try:
        return await call_next(request)
    except Exception:
        logger.error("unhandled error on %s %s", request.method, request.url.path, exc_info=True)
        fallback = InternalError()
        return JSONResponse(status_code=fallback.http_status, content=error_payload(fallback.kind, fallback.message))


@app.exception_handler(AppError)
async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=error_payload(exc.kind, exc.message))


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(status_code=400, content=error_payload("validation_error", "; ".join(problems) or "Invalid request"))


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # noqa: ARG001
    kind = _HTTP_ERROR_KINDS.get(exc.status_code, "http_error")
    return JSONResponse(status_code=exc.status_code, content=error_payload(kind, str(exc.detail)))


app.include_router(diet_plans_router)
app.include_router(orders_router)
app.include_router(products_router)
app.include_router(inventory_router)
app.include_router(suggestions_router)


@app.get("/api/health")
def health() -> dict:
    return {"ok": True}
