"""FastAPI entrypoint for the product transactions HTTP endpoints."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from backend.factory import build_transaction_service
from backend.services.transaction_service import TransactionService
from shared import config as _config
from shared.models import ServiceError, ServiceErrorCode


logger = logging.getLogger(__name__)


_STATUS_BY_ERROR_CODE: dict[ServiceErrorCode, int] = {
    ServiceErrorCode.VALIDATION_ERROR: 400,
    ServiceErrorCode.UPSTREAM_ERROR: 502,
    ServiceErrorCode.STORAGE_ERROR: 500,
}


@lru_cache(maxsize=1)
def get_transaction_service() -> TransactionService:
    """Create and cache the transaction service (and its store handle) once per process."""

    return build_transaction_service()


def _raise_for_service_error(error: ServiceError) -> None:
    status_code = _STATUS_BY_ERROR_CODE.get(error.code, 500)
    raise HTTPException(status_code=status_code, detail=error.message)


app = FastAPI(title="Product Transactions API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed query or path parameters with 400 instead of 422."""

    logger.info("invalid_request method=%s path=%s errors=%s", request.method, request.url.path, len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.get("/initialize", response_class=PlainTextResponse)
def initialize_database() -> str:
    """Seed the store from the third-party feed. Each call appends a full copy."""

    result = get_transaction_service().initialize_database()
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)
    return f"Database initialized successfully! Inserted {result.inserted} transactions."


@app.get("/transactions")
def list_transactions(
    search: str | None = None,
    page: int = 1,
    per_page: int = Query(default=10, alias="perPage"),
) -> Any:
    """Return one page of transactions, optionally filtered by a search term."""

    result = get_transaction_service().list_transactions(search=search, page=page, per_page=per_page)
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)
    return [transaction.model_dump(mode="json", by_alias=True) for transaction in result]


@app.get("/statistics/{month}")
def monthly_statistics(month: str) -> Any:
    """Return sale totals for a month (1-12) across every year."""

    result = get_transaction_service().monthly_statistics(month)
    if isinstance(result, ServiceError):
        _raise_for_service_error(result)
    return result.model_dump(mode="json", by_alias=True)
