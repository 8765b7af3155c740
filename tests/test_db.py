from __future__ import annotations

import sqlite3

from usermgmt.db import _qmark_to_pct, connect, detect_dialect, init_db, is_unique_violation
from usermgmt.schema import SCHEMA_POSTGRES, get_schema_sql


def test_detect_dialect():
    assert detect_dialect("postgresql://u:p@localhost/db") == "postgres"
    assert detect_dialect("postgres://u:p@localhost/db") == "postgres"
    assert detect_dialect("sqlite:///tmp/x.sqlite") == "sqlite"
    assert detect_dialect("./users.sqlite") == "sqlite"
    assert detect_dialect("") == "sqlite"


def test_qmark_to_pct_skips_quoted_literals():
    sql = "UPDATE users SET status='what?' WHERE id IN (?,?) AND name LIKE 'a%'"
    assert _qmark_to_pct(sql) == "UPDATE users SET status='what?' WHERE id IN (%s,%s) AND name LIKE 'a%%'"
    assert _qmark_to_pct("SELECT 'it''s?' , ?") == "SELECT 'it''s?' , %s"


def test_postgres_schema_is_derived():
    assert "BIGSERIAL PRIMARY KEY" in SCHEMA_POSTGRES
    assert "AUTOINCREMENT" not in SCHEMA_POSTGRES
    assert "PRAGMA" not in SCHEMA_POSTGRES
    assert get_schema_sql("postgres") is SCHEMA_POSTGRES


def test_init_db_is_idempotent(tmp_path):
    dsn = str(tmp_path / "nested" / "users.sqlite")
    init_db(dsn)
    init_db(dsn)
    with connect(dsn) as conn:
        cols = {r["name"] for r in conn.execute("PRAGMA table_info(users)").fetchall()}
    assert cols == {"id", "name", "email", "password_hash", "status", "last_login", "created_at"}


def test_init_db_migrates_legacy_table(tmp_path):
    dsn = str(tmp_path / "legacy.sqlite")
    with connect(dsn) as conn:
        conn.execute(
            """
            CREATE TABLE users (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            "INSERT INTO users (name, email, password_hash, created_at) VALUES (?,?,?,?)",
            ("old", "old@example.com", "x", "2020-01-01T00:00:00Z"),
        )

    init_db(dsn)

    with connect(dsn) as conn:
        r = conn.execute("SELECT status, last_login FROM users WHERE email=?", ("old@example.com",)).fetchone()
    assert r["status"] == "active"
    assert r["last_login"] is None


def test_connect_rolls_back_on_error(tmp_path):
    dsn = str(tmp_path / "rb.sqlite")
    init_db(dsn)
    try:
        with connect(dsn) as conn:
            conn.execute(
                "INSERT INTO users (name, email, password_hash, created_at) VALUES (?,?,?,?)",
                ("a", "a@example.com", "x", "2020-01-01T00:00:00Z"),
            )
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    with connect(dsn) as conn:
        assert conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"] == 0


def test_is_unique_violation(tmp_path):
    dsn = str(tmp_path / "u.sqlite")
    init_db(dsn)
    insert = "INSERT INTO users (name, email, password_hash, created_at) VALUES (?,?,?,?)"
    caught = None
    with connect(dsn) as conn:
        conn.execute(insert, ("a", "a@example.com", "x", "t"))
        try:
            conn.execute(insert, ("b", "a@example.com", "x", "t"))
        except sqlite3.IntegrityError as e:
            caught = e
    assert caught is not None and is_unique_violation(caught)
    assert not is_unique_violation(sqlite3.IntegrityError("NOT NULL constraint failed: users.name"))
    assert not is_unique_violation(ValueError("email_exists"))
