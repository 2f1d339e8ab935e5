"""Admin checks for the destructive and debugging routes of the ops API.

Accepts a legacy shared token or an HS256 JWT carrying an admin role.
"""

import logging
import os
from typing import Optional

import jwt

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """Raised when a JWT token cannot be verified."""


def _verify_jwt(token: str, secret: str) -> dict:
    """Verify and return the JWT payload."""
    try:
        return jwt.decode(token, secret, algorithms=["HS256"])
    except jwt.PyJWTError as exc:
        raise InvalidTokenError("Invalid JWT token") from exc


def admin_required() -> bool:
    """Admin checks apply only once an admin mechanism is configured."""
    return bool(os.getenv("ADMIN_TOKEN") or os.getenv("ADMIN_JWT_SECRET"))


def is_admin(authorization: Optional[str], x_admin_token: Optional[str]) -> bool:
    """Return True if provided credentials authorize an admin action.

    Accepts either:
    - `x_admin_token` matching the `ADMIN_TOKEN` env var, or
    - `Authorization: Bearer <jwt>` where the JWT verifies with
      `ADMIN_JWT_SECRET` and contains the claim `role: admin`.
    """
    admin_token = os.getenv("ADMIN_TOKEN")
    if admin_token and x_admin_token and x_admin_token == admin_token:
        return True

    jwt_secret = os.getenv("ADMIN_JWT_SECRET")
    if jwt_secret and authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1]
        try:
            payload = _verify_jwt(token, jwt_secret)
        except InvalidTokenError as e:
            logger.warning("Rejected admin JWT: %s", e)
            return False
        return payload.get("role") == "admin" or bool(payload.get("is_admin"))

    return False
