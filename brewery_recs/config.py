from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_JWT_SECRET = "thisIsOurSupserSecretKeyOnlyKnownToTheBestStudentsAtConestoga"
FIELD_CASINGS = ("camel", "pascal")


@dataclass(frozen=True)
class AppConfig:
    environment: str = "development"
    brewery_api_url: str = "http://localhost:5089"
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    host: str = "0.0.0.0"
    port: int = 3004
    # Upstream contract: deployments disagree on path and key casing.
    user_profile_path: str = "/api/user/{user_id}"
    field_casing: str = "camel"
    forward_authorization: bool = True
    upstream_timeout: float = 10.0
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def load_config() -> AppConfig:
    """
    Build the application config from the environment.

    ``.env.<APP_ENV>`` (``.env.local`` when APP_ENV is unset) is loaded first;
    variables already present in the process environment win.
    """
    load_dotenv(_PROJECT_ROOT / f".env.{os.getenv('APP_ENV') or 'local'}")

    field_casing = os.getenv("BREWERY_FIELD_CASING", "camel").strip().lower()
    if field_casing not in FIELD_CASINGS:
        raise ValueError(
            f"BREWERY_FIELD_CASING must be one of {FIELD_CASINGS}, got {field_casing!r}"
        )

    origins = os.getenv("CORS_ORIGINS", "*")

    return AppConfig(
        environment=os.getenv("APP_ENV") or "development",
        brewery_api_url=os.getenv("BREWERY_API_URL", "http://localhost:5089").rstrip("/"),
        jwt_secret=os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3004")),
        user_profile_path=os.getenv("BREWERY_USER_PROFILE_PATH", "/api/user/{user_id}"),
        field_casing=field_casing,
        forward_authorization=_env_bool("FORWARD_AUTHORIZATION", True),
        upstream_timeout=float(os.getenv("UPSTREAM_TIMEOUT", "10.0")),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
