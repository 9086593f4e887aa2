"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.pm_common.enums import SecretStoreBackend
from src.pm_common.errors import AppError, ProvingUnavailableError
from src.pm_common.response import app_error_response
from src.pm_darkpool.api.router import router as darkpool_router
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_proof.infrastructure.snarkjs_backend import SnarkjsProverBackend

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify the SQL store (if selected) and the prover. Shutdown: dispose."""
    use_sql = SecretStoreBackend(settings.SECRET_STORE_BACKEND.lower()) is SecretStoreBackend.SQL
    if use_sql:
        from sqlalchemy import text

        from src.pm_common.database import engine

        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    backend = SnarkjsProverBackend(
        settings.SNARKJS_BIN,
        settings.CIRCUIT_WASM_PATH,
        settings.CIRCUIT_ZKEY_PATH,
        timeout=settings.PROVER_TIMEOUT_SECONDS,
    )
    try:
        backend.check_available()
    except ProvingUnavailableError as exc:
        # Commits and cancels still work; reveals fail until this is fixed.
        logger.warning("Prover not ready: %s", exc.message)
    yield
    if use_sql:
        from src.pm_common.database import engine

        await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.integrity:
        logger.critical("Integrity error %d on %s: %s", exc.code, request.url.path, exc.message)
    resp = app_error_response(exc)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(darkpool_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
