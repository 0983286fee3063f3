"""FastAPI application factory."""

import hmac
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from uniagent import __version__
from uniagent.broker.service import Broker
from uniagent.broker.store import PendingTransactionStore
from uniagent.config import Settings, get_settings
from uniagent.engine.base import ExecutionEngine
from uniagent.engine.factory import create_engine
from uniagent.errors import BrokerError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    app.state.store.start()
    logger.info(f"Broker ready (engine: {app.state.engine.name})")
    yield
    # Shutdown
    await app.state.store.stop()
    await app.state.engine.close()
    logger.info("Broker stopped")


def _validation_message(exc: RequestValidationError) -> str:
    """Turn the first validation error into a one-line message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    if not loc:
        return "Missing request body" if error.get("type") == "missing" else "Invalid request body"
    field = loc[-1]
    if error.get("type") == "missing":
        return f"Missing {field}"
    return f"Invalid {field}: {error.get('msg', 'invalid value')}"


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BrokerError)
    async def broker_error_handler(request: Request, exc: BrokerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )


def _register_auth(app: FastAPI, settings: Settings) -> None:
    """Require the shared API secret on every request when one is configured."""
    if not settings.auth_enabled:
        logger.warning("API_SECRET not set - API authentication disabled")
        return

    @app.middleware("http")
    async def require_api_key(request: Request, call_next):
        token = request.headers.get("x-api-key") or request.query_params.get("apiKey") or ""
        if not hmac.compare_digest(token.encode(), settings.api_secret.encode()):
            return JSONResponse(status_code=401, content={"error": "Unauthorized"})
        return await call_next(request)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[ExecutionEngine] = None,
    store: Optional[PendingTransactionStore] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        engine: Execution engine (defaults to create_engine(settings))
        store: Pending transaction store (defaults to one built from settings)
    """
    settings = settings or get_settings()
    engine = engine or create_engine(settings)
    if store is None:
        store = PendingTransactionStore(
            ttl_seconds=settings.pending_tx_ttl_seconds,
            sweep_interval=settings.pending_tx_sweep_interval_seconds,
        )

    app = FastAPI(
        title="UniAgent API",
        description="Non-custodial cross-chain trading broker",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.store = store
    app.state.broker = Broker(engine=engine, store=store, settings=settings)

    _register_exception_handlers(app)
    _register_auth(app, settings)

    # CORS middleware, added last so it wraps auth and answers preflights
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from uniagent.api.routes import health
    from uniagent.web.controllers import accounts_router, chains_router, transactions_router

    app.include_router(health.router, tags=["Health"])
    app.include_router(chains_router)
    app.include_router(transactions_router)
    app.include_router(accounts_router)

    return app
