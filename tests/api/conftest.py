"""API test fixtures — FastAPI app with a prebuilt dispatcher + async client.

Invariants:
    - ASGITransport does not run the lifespan, so the dispatcher is attached
      to app.state directly (same object the lifespan would build)
    - auth_app installs Starlette AuthenticationMiddleware with a header backend:
      X-User names the caller, X-Roles is a comma-separated role list
"""

import pytest
from httpx import ASGITransport, AsyncClient
from starlette.authentication import AuthCredentials, AuthenticationBackend, SimpleUser
from starlette.middleware.authentication import AuthenticationMiddleware

from httprpc.config import Settings
from httprpc.main import build_dispatcher, create_app

MATH_CONTRACT = "tests.fixtures.math_service:MathService"


class HeaderAuthBackend(AuthenticationBackend):
    async def authenticate(self, conn):
        user = conn.headers.get("x-user")
        if not user:
            return None
        roles = [r.strip() for r in conn.headers.get("x-roles", "").split(",") if r.strip()]
        return AuthCredentials(roles), SimpleUser(user)


@pytest.fixture
def settings() -> Settings:
    return Settings(service_contract=MATH_CONTRACT, log_format="text")


@pytest.fixture
def app(settings, math_bundles):
    app = create_app(settings)
    app.state.dispatcher = build_dispatcher(settings, math_bundles)
    return app


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def auth_client(app):
    app.add_middleware(AuthenticationMiddleware, backend=HeaderAuthBackend())
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
