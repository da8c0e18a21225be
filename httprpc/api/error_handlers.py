"""Error Handlers — global exception handlers for the RPC API.

Invariants:
    - RpcError → its http_status with the structured error envelope
    - Exception (catch-all) → 500, never leaks internal details
    - Causes of InternalOperationError are logged, never serialized

Design Decisions:
    - Two-layer handler: domain (RpcError), catch-all (Exception)
    - 4xx logged at WARNING, 5xx at ERROR
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from httprpc.core.errors import RpcError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_rpc_error_handler(app)
    _register_generic_error_handler(app)


def _register_rpc_error_handler(app: FastAPI) -> None:
    """Register dispatch error handler."""

    @app.exception_handler(RpcError)
    async def rpc_error_handler(request: Request, exc: RpcError):
        """Handle every dispatch fault."""
        exc.context.path = request.url.path
        level = logging.WARNING if exc.http_status < 500 else logging.ERROR
        logger.log(
            level,
            f"RpcError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "operation": exc.context.operation,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )
