"""Root conftest — shared test configuration and sample-contract fixtures."""

import os

import pytest

# Module-level app in httprpc.main reads settings at import time
os.environ.setdefault(
    "HTTPRPC_SERVICE_CONTRACT", "tests.fixtures.math_service:MathService",
)
os.environ.setdefault("HTTPRPC_LOG_FORMAT", "text")

from httprpc.core.localization import MappingBundleSource  # noqa: E402
from httprpc.services.dispatcher import RequestDispatcher  # noqa: E402
from httprpc.services.registry import OperationRegistry  # noqa: E402
from tests.fixtures.math_service import MathService, StreamService  # noqa: E402


MATH_BUNDLES = {
    "MathService": {
        "": {
            "add": "Adds two integers.",
            "add_a": "First addend.",
            "add_b": "Second addend.",
            "sum": "Sums a list of integers.",
        },
        "pt": {
            "add": "Soma dois inteiros.",
            "add_a": "Primeira parcela.",
        },
        "pt-BR": {
            "add_b": "Segunda parcela (BR).",
        },
    },
}


@pytest.fixture(autouse=True)
def reset_math_service():
    MathService.cursors.clear()
    MathService.instances.clear()
    StreamService.cursors.clear()
    yield
    MathService.cursors.clear()
    MathService.instances.clear()
    StreamService.cursors.clear()


@pytest.fixture
def math_registry() -> OperationRegistry:
    return OperationRegistry.from_contract(MathService)


@pytest.fixture
def math_bundles() -> MappingBundleSource:
    return MappingBundleSource(MATH_BUNDLES)


@pytest.fixture
def math_dispatcher(math_registry, math_bundles) -> RequestDispatcher:
    return RequestDispatcher(math_registry, math_bundles)
