"""
kube_gateway.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from kube_gateway.auth.models import SYSTEM_MASTERS


class AccessRuleConfig(BaseModel):
    # One RBAC-style rule; "*" matches everything, empty namespaces/names means unrestricted.
    resources: list[str] = Field(default_factory=list)
    verbs: list[str] = Field(default_factory=list)
    namespaces: list[str] = Field(default_factory=list)
    names: list[str] = Field(default_factory=list)


class Settings(BaseSettings):
    """
    Env-driven configuration with defaults safe for local dev.

    Complex fields (e.g. `access_rules`) are read from JSON-encoded env vars:
    KGW_ACCESS_RULES='{"viewers": [{"resources": ["*"], "verbs": ["get", "list"]}]}'
    """

    model_config = SettingsConfigDict(env_prefix="KGW_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "kube-gateway"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Identity provider selection
    auth_mode: Literal["jwt", "token_review", "static"] = "jwt"

    jwt_alg: str = "HS256"
    jwt_issuer: str = "kube-gateway"
    jwt_audience: str = "kube-gateway-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    token_review_url: str | None = None
    token_review_timeout_seconds: float = 5.0

    # Only honoured when auth_mode == "static" outside prod.
    static_user_name: str = "bob"
    static_user_uid: str = "bob"
    static_user_groups: list[str] = Field(default_factory=lambda: [SYSTEM_MASTERS])

    # Access control
    admin_group: str = SYSTEM_MASTERS
    access_rules: dict[str, list[AccessRuleConfig]] = Field(default_factory=dict)

    # Persistence for the default resource store
    database_url: str = "sqlite+aiosqlite:///./kube_gateway.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Settings are read once at startup; schema templates and access rules are fixed
# for the lifetime of the process.
