"""
portal_access.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hold the redirect targets used by view gates.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PORTAL_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "portal-access"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "portal-access"
    jwt_audience: str = "portal-web"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    jwt_leeway_seconds: float = Field(default=10.0, ge=0)

    # Redirect targets for gated views.
    sign_in_path: str = "/auth/signin"
    denied_path: str = "/portal/dashboard"

    # Session lifecycle
    session_resolve_timeout_seconds: float = Field(default=10.0, gt=0)
    session_refresh_interval_seconds: float = Field(default=60.0, gt=0)
    session_refresh_threshold_seconds: int = Field(default=300, ge=0)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Redirect targets live here rather than in the catalog so deployments can move the
# sign-in page without touching access rules.
