"""Authorization gate for protected routes."""
import logging

from fastapi import Depends, Header

from .auth import Identity, decode_access_token
from .errors import Forbidden, InvalidToken, Unauthenticated

logger = logging.getLogger(__name__)


def extract_token(authorization: str | None) -> str:
    # Raw token is the documented transport; a Bearer prefix is tolerated.
    if authorization is None or not authorization.strip():
        raise Unauthenticated()
    token = authorization.strip()
    if token.lower().startswith("bearer "):
        token = token.split(None, 1)[1].strip()
    return token


def get_current_identity(authorization: str | None = Header(default=None)) -> Identity:
    """Verify the request's token and return the identity it asserts.

    The role embedded in the token is trusted for the token's lifetime; it is
    not re-checked against the user table. Failures propagate as
    ``Unauthenticated`` / ``InvalidToken`` and are rendered by the app.
    """
    try:
        return decode_access_token(extract_token(authorization))
    except (Unauthenticated, InvalidToken) as e:
        logger.warning("rejected request: %s", e.message)
        raise


def require_role(role: str, message: str | None = None):
    """Dependency factory: authenticate, then insist on ``role``.

    Usage: ``Depends(require_role("seller"))``
    """
    def role_checker(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role != role:
            logger.warning("user %s with role %r denied: %s required", identity.id, identity.role, role)
            raise Forbidden(message or f"Access denied. Required role: {role}")
        return identity
    return role_checker
