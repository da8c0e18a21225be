"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - service_contract is the single required value; an empty value fails startup
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - HTTPRPC_ prefix keeps the service's variables apart from the host's
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HTTPRPC_", env_file=".env", case_sensitive=False,
        extra="ignore",
    )

    # Service contract, e.g. "myapp.services:MathService"
    service_contract: str = ""
    strict_parameter_types: bool = True

    # Transport
    rpc_prefix: str = "/rpc"
    cors_origins: list[str] = []
    host: str = "0.0.0.0"
    port: int = 8080

    @field_validator("rpc_prefix")
    @classmethod
    def normalize_prefix(cls, v: str) -> str:
        """Strip slashes: "rpc/" → "/rpc", "/" → "" (mount at root)."""
        v = v.strip().strip("/")
        return f"/{v}" if v else ""

    # Localization
    bundle_dir: str | None = None
    default_locale: str = "en"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
