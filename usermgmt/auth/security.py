from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext


_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_JWT_ALG = "HS256"


class TokenVerificationError(Exception):
    """Base class for bearer-token failures."""


class TokenMissing(TokenVerificationError):
    pass


class TokenExpired(TokenVerificationError):
    pass


class TokenMalformed(TokenVerificationError):
    pass


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except ValueError:
        # Unrecognized or corrupt hash in the row.
        return False


def issue_token(*, secret: str, user_id: int, expires_minutes: int = 60) -> str:
    """Sign a bearer token for `user_id`, valid for `expires_minutes` from now."""
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=max(1, int(expires_minutes)))

    payload: Dict[str, Any] = {
        "sub": str(int(user_id)),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def verify_token(*, token: str | None, secret: str) -> int:
    """Return the user id carried by `token`.

    Stateless: checks signature and expiry only, never the store.
    """
    if not token:
        raise TokenMissing("token_missing")
    if not secret:
        raise ValueError("jwt_secret_blank")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[_JWT_ALG],
            options={"require": ["sub", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired("token_expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenMalformed("token_invalid") from e

    try:
        return int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise TokenMalformed("token_sub_not_int") from e
