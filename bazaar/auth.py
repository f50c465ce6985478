import time
from typing import NamedTuple, Optional

import jwt
from passlib.context import CryptContext

from .config import get_settings
from .errors import InvalidToken

# pbkdf2_sha256 avoids the bcrypt 72-byte limitation; every hash gets a fresh salt
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ALGORITHM = "HS256"


class Identity(NamedTuple):
    """Authenticated caller as asserted by a verified token."""
    id: int
    role: str


def create_access_token(user_id: int, role: str, expires_delta: Optional[int] = None) -> str:
    settings = get_settings()
    now = int(time.time())
    payload = {"sub": str(user_id), "role": role, "iat": now}
    lifetime = settings.token_expire_seconds if expires_delta is None else expires_delta
    if lifetime:
        payload["exp"] = now + lifetime
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(
            token,
            get_settings().jwt_secret,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "role"]},
        )
        return Identity(id=int(payload["sub"]), role=str(payload["role"]))
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        raise InvalidToken() from e


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password must not be empty")
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not plain or not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # unidentifiable or corrupted stored hash
        return False
