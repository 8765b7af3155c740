from __future__ import annotations

from typing import Any, Callable, Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from helpers import PASSWORD, SECRET
from usermgmt.api.server import create_app
from usermgmt.config import Config
from usermgmt.db import connect, init_db


@pytest.fixture
def cfg(tmp_path) -> Config:
    return Config(
        DB_DSN=str(tmp_path / "users.sqlite"),
        AUTH_JWT_SECRET=SECRET,
        AUTH_TOKEN_EXPIRE_MINUTES=60,
        CORS_ALLOW_ORIGINS="",
    )


@pytest.fixture
def dsn(cfg: Config) -> str:
    init_db(cfg.DB_DSN)
    return cfg.DB_DSN


@pytest.fixture
def client(cfg: Config) -> Iterator[TestClient]:
    # Entering the context runs the startup hook, which creates the schema.
    with TestClient(create_app(cfg)) as c:
        yield c


@pytest.fixture
def signup(client: TestClient) -> Callable[..., Dict[str, Any]]:
    """Register + log in; returns {"id", "token", "headers", "email"}."""

    def _signup(name: str, email: str | None = None, password: str = PASSWORD) -> Dict[str, Any]:
        email = email or f"{name.lower()}@example.com"
        r = client.post("/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        r = client.post("/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        body = r.json()
        return {
            "id": body["user"]["id"],
            "token": body["token"],
            "headers": {"Authorization": f"Bearer {body['token']}"},
            "email": email,
        }

    return _signup


@pytest.fixture
def row(cfg: Config) -> Callable[[int], Any]:
    """Read one users row straight from the store (None when deleted)."""

    def _row(user_id: int) -> Any:
        with connect(cfg.DB_DSN) as conn:
            r = conn.execute("SELECT * FROM users WHERE id=?", (user_id,)).fetchone()
        return dict(r) if r is not None else None

    return _row


@pytest.fixture
def count_users(cfg: Config) -> Callable[[], int]:
    def _count() -> int:
        with connect(cfg.DB_DSN) as conn:
            return int(conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"])

    return _count
