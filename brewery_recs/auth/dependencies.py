from __future__ import annotations

import logging

import jwt
from fastapi import HTTPException, Request
from pydantic import ValidationError

from ..config import AppConfig
from ..recommendations.models import AuthenticatedUser

logger = logging.getLogger(__name__)


def get_authorization(request: Request) -> str | None:
    """Return the inbound Authorization header verbatim, or ``None``."""
    return request.headers.get("authorization")


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split()
    return parts[1] if len(parts) > 1 else None


def decode_token(token: str, config: AppConfig) -> AuthenticatedUser:
    payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    return AuthenticatedUser.model_validate(payload)


def get_optional_user(request: Request) -> AuthenticatedUser | None:
    """Return the token's user, ``None`` when anonymous, or raise 401."""
    token = _bearer_token(request.headers.get("authorization"))
    if not token:
        return None
    try:
        return decode_token(token, request.app.state.config)
    except (jwt.InvalidTokenError, ValidationError):
        logger.info("Rejected bearer token", exc_info=True)
        raise HTTPException(status_code=401, detail="Invalid token")
