"""RPC Route — adapts HTTP requests to the transport-neutral dispatcher.

Invariants:
    - GET and POST are handled identically; only parameter extraction differs
    - Query parameters first, then urlencoded/multipart form fields (POST), all
      values kept per name in arrival order
    - Caller identity comes from Starlette's AuthenticationMiddleware when installed;
      without it (or unauthenticated) the request is anonymous
    - No body and no content-type for operations without a return value

Design Decisions:
    - Dispatcher runs in the threadpool: operations are plain blocking functions,
      one worker thread per in-flight request
    - Router built per prefix (build_router) because the mount point is configurable
"""

import logging
from collections import defaultdict

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from httprpc.core.localization import negotiate_locale
from httprpc.services.dispatcher import RequestDispatcher, RpcRequest

logger = logging.getLogger(__name__)

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def get_dispatcher(request: Request) -> RequestDispatcher | None:
    return getattr(request.app.state, "dispatcher", None)


async def extract_parameters(request: Request) -> dict[str, list[str]]:
    """Collect every value per parameter name, like servlet getParameterValues."""
    values: dict[str, list[str]] = defaultdict(list)
    for name, value in request.query_params.multi_items():
        values[name].append(value)
    content_type = request.headers.get("content-type", "")
    if request.method == "POST" and content_type.startswith(_FORM_TYPES):
        form = await request.form()
        for name, value in form.multi_items():
            if isinstance(value, str):
                values[name].append(value)
    return dict(values)


def extract_identity(request: Request):
    """(username, role predicate) from the auth middleware, or (None, None)."""
    if "user" not in request.scope:
        return None, None
    user = request.user
    if not getattr(user, "is_authenticated", False):
        return None, None
    return user.display_name, lambda role: role in request.auth.scopes


async def build_rpc_request(
    request: Request, operation: str, default_locale: str,
) -> RpcRequest:
    username, is_in_role = extract_identity(request)
    return RpcRequest(
        operation=operation,
        parameters=await extract_parameters(request),
        locale=negotiate_locale(request.headers.get("accept-language"), default_locale),
        username=username,
        is_in_role=is_in_role,
    )


def build_router(prefix: str, default_locale: str = "en") -> APIRouter:
    """Router serving the descriptor list at `prefix` and operations below it."""
    router = APIRouter(prefix=prefix, tags=["rpc"])

    async def respond(request: Request, operation: str) -> Response:
        dispatcher = get_dispatcher(request)
        if dispatcher is None:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "reason": "dispatcher_not_initialized"},
            )
        rpc_request = await build_rpc_request(request, operation, default_locale)
        result = await run_in_threadpool(dispatcher.dispatch, rpc_request)
        if result.body is None:
            return Response(status_code=status.HTTP_200_OK)
        return Response(
            content=result.body, media_type=result.content_type,
            status_code=status.HTTP_200_OK,
        )

    async def describe(request: Request) -> Response:
        return await respond(request, "")

    async def call(request: Request, operation: str) -> Response:
        return await respond(request, operation)

    if prefix:
        router.add_api_route(
            "", describe, methods=["GET", "POST"], include_in_schema=False,
        )
    router.add_api_route(
        "/{operation:path}", call, methods=["GET", "POST"], include_in_schema=False,
    )
    return router
