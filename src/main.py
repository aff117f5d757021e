"""FastAPI application entry point.

Run with: uvicorn src.main:app --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import settings
from src.rk_account.api.router import router as account_router
from src.rk_block.api.router import router as block_router
from src.rk_chain.infrastructure.http_client import HttpChainClient
from src.rk_common.chain_params import MIDDLEWARE_VERSION, ChainParameters
from src.rk_common.enums import Mode
from src.rk_common.errors import AppError, InvalidRequestError
from src.rk_common.response import error_response
from src.rk_construction.api.router import router as construction_router
from src.rk_gateway.middleware.request_log import RequestLogMiddleware
from src.rk_network.api.router import router as network_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: open the node client when online. Shutdown: close it."""
    client = None
    if app.state.mode == Mode.ONLINE:
        client = HttpChainClient(
            settings.NODE_RPC_URL,
            settings.NODE_API_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        app.state.chain_client = client
    logger.info(
        "Serving %s/%s in %s mode",
        app.state.params.blockchain, app.state.params.network, app.state.mode.value,
    )
    yield
    if client is not None:
        await client.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version=MIDDLEWARE_VERSION,
    lifespan=lifespan,
)
app.state.params = ChainParameters.from_settings(settings)
app.state.mode = Mode(settings.MODE)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in e["loc"]], "msg": e["msg"], "type": e["type"]}
        for e in exc.errors()
    ]
    err = InvalidRequestError(errors)
    return JSONResponse(status_code=err.http_status, content=error_response(err))


app.include_router(network_router)
app.include_router(account_router)
app.include_router(block_router)
app.include_router(construction_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": MIDDLEWARE_VERSION}
