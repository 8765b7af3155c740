from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from usermgmt.config import Config
from usermgmt.db import connect
from usermgmt.errors import Forbidden, InternalError, InvalidToken, Unauthorized

from .crud import STATUS_BLOCKED, get_user_by_id, public_user
from .security import TokenVerificationError, verify_token


_bearer = HTTPBearer(auto_error=False)


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def get_config(request: Request) -> Config:
    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise InternalError("server_config_missing")
    return cfg


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    cfg: Config = Depends(get_config),
) -> Dict[str, Any]:
    """Authenticate a request.

    A valid token is necessary but not sufficient: the account row is read on
    every call, so a block or delete takes effect on the caller's very next
    request even though their token is still cryptographically valid.
    """

    # HTTPBearer yields None for a missing header, a non-Bearer scheme or an
    # empty credential.
    if credentials is None or not credentials.credentials:
        raise Unauthorized()

    try:
        user_id = verify_token(token=credentials.credentials, secret=cfg.AUTH_JWT_SECRET)
    except TokenVerificationError:
        raise InvalidToken()

    try:
        with connect(cfg.DB_DSN) as conn:
            row = get_user_by_id(conn, user_id)
    except Exception as e:
        _debug(f"user lookup failed: {e!r}")
        raise InternalError() from e

    if row is None or row["status"] == STATUS_BLOCKED:
        raise Forbidden()

    user = public_user(row)
    request.state.user = user
    return user
