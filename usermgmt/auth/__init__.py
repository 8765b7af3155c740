"""Authentication / authorization helpers.

Auth is deliberately lightweight:

- Users table (email/password hash + active/blocked status)
- JWT access tokens sent as `Authorization: Bearer <token>`

Tokens are never revoked. Instead `get_current_user` re-reads the account on
every request and refuses blocked or deleted accounts.
"""

from .deps import get_config, get_current_user
from .crud import create_user

__all__ = [
    "get_config",
    "get_current_user",
    "create_user",
]
