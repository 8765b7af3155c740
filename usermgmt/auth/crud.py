from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from usermgmt.db import is_unique_violation
from usermgmt.util.time import utcnow_iso

from .security import hash_password


STATUS_ACTIVE = "active"
STATUS_BLOCKED = "blocked"

_PUBLIC_COLUMNS = "id, name, email, last_login, status"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    d.pop("password_hash", None)
    return d


def _placeholders(n: int) -> str:
    return ",".join("?" for _ in range(n))


# Row ids are signed 64-bit on both engines; anything outside can never match.
_ID_MIN = -(2**63)
_ID_MAX = 2**63 - 1


def _in_id_range(user_id: int) -> bool:
    return _ID_MIN <= user_id <= _ID_MAX


def _ids(user_ids: Sequence[int]) -> List[int]:
    # Deduplicate while keeping the caller's order.
    return list(dict.fromkeys(i for i in (int(u) for u in user_ids) if _in_id_range(i)))


def get_user_by_email(conn: Any, email: str) -> Optional[Any]:
    e = normalize_email(email)
    if not e:
        return None
    return conn.execute(
        "SELECT * FROM users WHERE email=?",
        (e,),
    ).fetchone()


def get_user_by_id(conn: Any, user_id: int) -> Optional[Any]:
    uid = int(user_id)
    if not _in_id_range(uid):
        return None
    return conn.execute(
        "SELECT * FROM users WHERE id=?",
        (uid,),
    ).fetchone()


def create_user(
    conn: Any,
    *,
    name: str,
    email: str,
    password: str,
    status: str = STATUS_ACTIVE,
) -> Dict[str, Any]:
    n = (name or "").strip()
    e = normalize_email(email)
    if not n:
        raise ValueError("name_blank")
    if not e:
        raise ValueError("email_blank")
    if status not in (STATUS_ACTIVE, STATUS_BLOCKED):
        raise ValueError("invalid_status")

    existing = conn.execute("SELECT 1 FROM users WHERE email=?", (e,)).fetchone()
    if existing is not None:
        raise ValueError("email_exists")

    try:
        conn.execute(
            """
            INSERT INTO users (name, email, password_hash, status, created_at)
            VALUES (?,?,?,?,?)
            """,
            (n, e, hash_password(password), status, utcnow_iso()),
        )
    except Exception as exc:
        # Lost a race with a concurrent registration for the same email.
        if is_unique_violation(exc):
            raise ValueError("email_exists") from exc
        raise

    row = get_user_by_email(conn, e)
    assert row is not None
    return public_user(row)


def touch_last_login(conn: Any, user_id: int) -> None:
    conn.execute(
        "UPDATE users SET last_login=? WHERE id=?",
        (utcnow_iso(), int(user_id)),
    )


def list_users(conn: Any) -> List[Dict[str, Any]]:
    """All accounts, most recently active first; never-logged-in accounts last."""
    rows = conn.execute(
        f"""
        SELECT {_PUBLIC_COLUMNS}
        FROM users
        ORDER BY (last_login IS NULL), last_login DESC, id ASC
        """
    ).fetchall()
    return [dict(r) for r in rows]


def set_status(conn: Any, user_ids: Sequence[int], status: str) -> int:
    """Set `status` on every listed account in one statement. Returns rows touched."""
    if status not in (STATUS_ACTIVE, STATUS_BLOCKED):
        raise ValueError("invalid_status")
    ids = _ids(user_ids)
    if not ids:
        return 0
    cur = conn.execute(
        f"UPDATE users SET status=? WHERE id IN ({_placeholders(len(ids))})",
        [status, *ids],
    )
    return int(cur.rowcount or 0)


def delete_users(conn: Any, user_ids: Sequence[int]) -> int:
    """Physically remove every listed account in one statement. Returns rows removed."""
    ids = _ids(user_ids)
    if not ids:
        return 0
    cur = conn.execute(
        f"DELETE FROM users WHERE id IN ({_placeholders(len(ids))})",
        ids,
    )
    return int(cur.rowcount or 0)
