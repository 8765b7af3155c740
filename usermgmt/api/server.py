from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from usermgmt.auth import get_config, get_current_user
from usermgmt.auth.crud import (
    STATUS_ACTIVE,
    STATUS_BLOCKED,
    create_user,
    delete_users,
    get_user_by_email,
    list_users,
    set_status,
    touch_last_login,
)
from usermgmt.auth.security import issue_token, verify_password
from usermgmt.config import Config, load_config
from usermgmt.db import connect, init_db
from usermgmt.errors import (
    ApiError,
    DuplicateEmail,
    Forbidden,
    InternalError,
    InvalidCredentials,
    ValidationError,
)


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


router = APIRouter()


@contextmanager
def _store(cfg: Config, action: str) -> Iterator[Any]:
    """Open a connection for one handler; anything that is not already an
    ApiError becomes an InternalError."""
    try:
        with connect(cfg.DB_DSN) as conn:
            yield conn
    except ApiError:
        raise
    except Exception as e:
        _debug(f"{action} failed: {e!r}")
        raise InternalError() from e


def _required(*values: Optional[str]) -> None:
    if any(not (v or "").strip() for v in values):
        raise ValidationError()


# -----------------------------
# Misc
# -----------------------------


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Welcome to the User Management API"


@router.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok"}


# -----------------------------
# Auth
# -----------------------------


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


@router.post("/register", status_code=201)
def register(payload: RegisterRequest, cfg: Config = Depends(get_config)) -> Dict[str, Any]:
    """Create an account. No token is issued; the client logs in separately."""
    _required(payload.name, payload.email, payload.password)

    with _store(cfg, "register") as conn:
        try:
            create_user(conn, name=payload.name, email=payload.email, password=payload.password)
        except ValueError as e:
            if str(e) == "email_exists":
                raise DuplicateEmail()
            raise ValidationError()

    return {"message": "User registered successfully"}


@router.post("/login")
def login(payload: LoginRequest, cfg: Config = Depends(get_config)) -> Dict[str, Any]:
    _required(payload.email, payload.password)

    with _store(cfg, "login") as conn:
        row = get_user_by_email(conn, payload.email)
        if row is None:
            raise InvalidCredentials()
        # Blocked wins over a wrong password, so check it first.
        if row["status"] == STATUS_BLOCKED:
            raise Forbidden("User is blocked")
        if not verify_password(payload.password, str(row["password_hash"])):
            raise InvalidCredentials()

        user_id = int(row["id"])
        touch_last_login(conn, user_id)
        token = issue_token(
            secret=cfg.AUTH_JWT_SECRET,
            user_id=user_id,
            expires_minutes=int(cfg.AUTH_TOKEN_EXPIRE_MINUTES),
        )

    name = str(row["name"])
    return {
        "token": token,
        "username": name,
        "user": {"id": user_id, "name": name, "email": str(row["email"])},
    }


@router.get("/me")
def me(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return {"user": user}


# -----------------------------
# Admin
# -----------------------------


class BulkActionRequest(BaseModel):
    userIds: List[int]


@router.get("/users")
def users(
    _user: Dict[str, Any] = Depends(get_current_user),
    cfg: Config = Depends(get_config),
) -> List[Dict[str, Any]]:
    with _store(cfg, "list users") as conn:
        return list_users(conn)


def _includes_caller(payload: BulkActionRequest, user: Dict[str, Any]) -> bool:
    return int(user["id"]) in set(payload.userIds)


@router.post("/block")
def block(
    payload: BulkActionRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    cfg: Config = Depends(get_config),
) -> Dict[str, Any]:
    with _store(cfg, "block") as conn:
        set_status(conn, payload.userIds, STATUS_BLOCKED)

    # Committed above: the caller's own block stands even though we answer 403.
    if _includes_caller(payload, user):
        raise Forbidden()
    return {"message": "User blocked successfully!"}


@router.post("/unblock")
def unblock(
    payload: BulkActionRequest,
    _user: Dict[str, Any] = Depends(get_current_user),
    cfg: Config = Depends(get_config),
) -> Dict[str, Any]:
    with _store(cfg, "unblock") as conn:
        set_status(conn, payload.userIds, STATUS_ACTIVE)
    return {"message": "User unblocked successfully!"}


@router.post("/delete")
def delete(
    payload: BulkActionRequest,
    user: Dict[str, Any] = Depends(get_current_user),
    cfg: Config = Depends(get_config),
) -> Dict[str, Any]:
    with _store(cfg, "delete") as conn:
        delete_users(conn, payload.userIds)

    if _includes_caller(payload, user):
        raise Forbidden()
    return {"message": "User deleted successfully!"}


# -----------------------------
# App
# -----------------------------


async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    err = ValidationError()
    return JSONResponse({"error": err.detail}, status_code=err.status_code)


def create_app(cfg: Optional[Config] = None) -> FastAPI:
    cfg = cfg or load_config()

    app = FastAPI(title="User Management API", version="0.1.0")
    # Handlers and auth deps read config from here; there is no module-level config.
    app.state.cfg = cfg

    cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    @app.on_event("startup")
    def _on_startup() -> None:
        init_db(cfg.DB_DSN)
        _debug("startup complete")

    app.include_router(router)
    return app
