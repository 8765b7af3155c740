"""HTTP-facing error taxonomy.

Every failure a handler reports is one of these. They are plain
`HTTPException`s, so FastAPI would render them on its own; the app registers a
handler that shapes the body as `{"error": <message>}` for the client.
"""

from __future__ import annotations

from typing import Dict, Optional

from fastapi import HTTPException


class ApiError(HTTPException):
    http_status: int = 500
    message: str = "Server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None) -> None:
        super().__init__(status_code=self.http_status, detail=detail or self.message, headers=headers)


class ValidationError(ApiError):
    http_status = 400
    message = "All fields required"


class DuplicateEmail(ApiError):
    http_status = 400
    message = "Email already exists"


class InvalidCredentials(ApiError):
    http_status = 400
    message = "Invalid credentials"


class Unauthorized(ApiError):
    http_status = 401
    message = "Unauthorized"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidToken(ApiError):
    http_status = 401
    message = "Invalid token"

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ApiError):
    http_status = 403
    message = "User blocked or deleted"


class InternalError(ApiError):
    http_status = 500
    message = "Server error"
