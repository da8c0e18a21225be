"""Application lifespan — contract loading at startup via TestClient."""

import pytest
from fastapi.testclient import TestClient

from httprpc.config import Settings
from httprpc.core.errors import ConfigurationError
from httprpc.main import build_dispatcher, create_app

MATH_CONTRACT = "tests.fixtures.math_service:MathService"


def test_startup_builds_dispatcher():
    app = create_app(Settings(service_contract=MATH_CONTRACT, log_format="text"))
    with TestClient(app) as client:
        assert app.state.dispatcher is not None
        response = client.get("/rpc/add", params={"a": "2", "b": "3"})
        assert response.text == "5"
        assert response.headers["content-type"] == "application/json; charset=UTF-8"


def test_custom_prefix():
    settings = Settings(service_contract=MATH_CONTRACT, rpc_prefix="api/calc/", log_format="text")
    assert settings.rpc_prefix == "/api/calc"
    with TestClient(create_app(settings)) as client:
        assert client.get("/api/calc/add?a=1&b=1").text == "2"
        assert client.get("/api/calc").status_code == 200


def test_root_prefix():
    settings = Settings(service_contract=MATH_CONTRACT, rpc_prefix="/", log_format="text")
    with TestClient(create_app(settings)) as client:
        assert client.get("/add?a=1&b=1").text == "2"
        assert isinstance(client.get("/").json(), list)
        assert client.get("/health/").json()["status"] == "healthy"


def test_bundle_dir_setting(tmp_path):
    (tmp_path / "MathService_es.json").write_text('{"add": "Suma."}', encoding="utf-8")
    settings = Settings(service_contract=MATH_CONTRACT, bundle_dir=str(tmp_path))
    dispatcher = build_dispatcher(settings)
    assert dispatcher.bundle_for("es").get("add") == "Suma."
    assert dispatcher.bundle_for("en") is None


@pytest.mark.parametrize("contract", [
    "",
    "tests.fixtures.math_service:NotAService",
    "tests.fixtures.nowhere:Service",
])
def test_bad_contract_is_configuration_error(contract):
    with pytest.raises(ConfigurationError):
        build_dispatcher(Settings(service_contract=contract))


def test_strict_setting_controls_registration():
    contract = "tests.fixtures.math_service:LegacyService"
    with pytest.raises(ConfigurationError):
        build_dispatcher(Settings(service_contract=contract))
    dispatcher = build_dispatcher(
        Settings(service_contract=contract, strict_parameter_types=False),
    )
    assert "schedule" in dispatcher.registry
