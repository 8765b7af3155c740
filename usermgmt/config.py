import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load a local .env file if present.
load_dotenv()


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide the JWT secret via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Core
    # -----------------
    # Preferred: set USERMGMT_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: USERMGMT_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("USERMGMT_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("USERMGMT_DB_PATH", "./usermgmt.sqlite")
    )

    # -----------------
    # Auth (JWT)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set JWT_SECRET to a strong random value.
    AUTH_JWT_SECRET: str = os.environ.get("JWT_SECRET", "dev_change_me")
    AUTH_TOKEN_EXPIRE_MINUTES: int = int(os.environ.get("AUTH_TOKEN_EXPIRE_MINUTES", "60"))  # 1 hour

    # -----------------
    # CORS
    # -----------------
    # The React client runs on :3000 in development.
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000",
    )


def load_config() -> Config:
    return Config()
