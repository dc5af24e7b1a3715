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
from sqlalchemy import text

from config.settings import settings
from src.pm_common.database import engine
from src.pm_common.errors import AppError
from src.pm_common.redis_client import check_redis, close_redis
from src.pm_common.response import error_response
from src.pm_gateway.api.router import router as wallet_router
from src.pm_gateway.middleware.request_log import RequestLogMiddleware
from src.pm_market.api.router import router as market_router
from src.pm_position.api.router import router as position_router
from src.pm_settlement.api.router import router as settlement_router
from src.pm_token_claim.api.router import router as token_claim_router
from src.pm_trading.api.router import router as trading_router
from src.pm_transaction.api.router import router as transaction_router
from src.pm_transaction.application.service import close_transaction_service

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: verify DB + Redis connections. Shutdown: cancel pending txs, dispose."""
    # Startup
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    await check_redis()
    logger.info("%s started", settings.APP_NAME)
    yield
    # Shutdown
    await close_transaction_service()
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("AppError %d on %s: %s", exc.code, request.url.path, exc.message)
    resp = error_response(exc.code, exc.message, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(wallet_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(trading_router, prefix="/api/v1")
app.include_router(settlement_router, prefix="/api/v1")
app.include_router(position_router, prefix="/api/v1")
app.include_router(transaction_router, prefix="/api/v1")
app.include_router(token_claim_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
