"""Process configuration, read once from the environment at startup."""
import os
from typing import NamedTuple, Tuple

from dotenv import load_dotenv

load_dotenv()


class Settings(NamedTuple):
    database_url: str
    jwt_secret: str
    token_expire_seconds: int
    host: str
    port: int
    log_level: str
    cors_origins: Tuple[str, ...]


def _split_origins(raw: str) -> Tuple[str, ...]:
    return tuple(o.strip() for o in raw.split(",") if o.strip())


def load_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./bazaar.db"),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret-change-me-please-0123456789"),
        # 0 disables the exp claim entirely
        token_expire_seconds=int(os.getenv("TOKEN_EXPIRE_SECONDS", str(60 * 60 * 24))),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_origins(os.getenv("CORS_ORIGINS", "*")),
    )


state = load_settings()


def get_settings() -> Settings:
    return state


def override(**fields) -> Settings:
    global state
    state = state._replace(**fields)
    return state
