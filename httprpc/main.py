"""HTTP-RPC API — FastAPI application factory and entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - The dispatcher is built in the lifespan; a ConfigurationError aborts startup
    - Global error handlers map RpcError → structured JSON responses
    - CORS configured from settings (not hardcoded)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app(settings) factory so tests and embedders pass their own settings;
      the module-level `app` uses environment settings for `uvicorn httprpc.main:app`
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from httprpc import __version__
from httprpc.api.error_handlers import register_error_handlers
from httprpc.api.routes import health, rpc
from httprpc.config import Settings, get_settings
from httprpc.core.localization import BundleSource
from httprpc.infrastructure.bundles import DirectoryBundleSource
from httprpc.infrastructure.observability import setup_logging
from httprpc.infrastructure.service_loader import load_service_contract
from httprpc.services.dispatcher import RequestDispatcher
from httprpc.services.registry import OperationRegistry

logger = logging.getLogger(__name__)


def build_dispatcher(
    settings: Settings, bundles: BundleSource | None = None,
) -> RequestDispatcher:
    """Resolve the contract, index its operations, attach bundles."""
    contract = load_service_contract(settings.service_contract)
    registry = OperationRegistry.from_contract(
        contract, strict=settings.strict_parameter_types,
    )
    if bundles is None and settings.bundle_dir:
        bundles = DirectoryBundleSource(settings.bundle_dir)
    return RequestDispatcher(registry, bundles)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    if getattr(app.state, "dispatcher", None) is None:
        app.state.dispatcher = build_dispatcher(settings)
    logger.info(
        f"HTTP-RPC API started for {app.state.dispatcher.contract.__name__} "
        f"at '{settings.rpc_prefix or '/'}'",
    )
    yield
    logger.info("HTTP-RPC API shutting down")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="HTTP-RPC API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.dispatcher = None

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    # Health first so a "/" rpc prefix cannot shadow it
    app.include_router(health.router)
    app.include_router(rpc.build_router(settings.rpc_prefix, settings.default_locale))

    register_error_handlers(app)
    return app


app = create_app()
