"""User Management Service - Backend.

A small REST backend for a single-page admin client:
- Accounts live in one `users` table (SQLite by default, Postgres optional).
- Sessions are stateless JWT bearer tokens.
- Every authenticated call re-reads the caller's row, so blocking an account
  takes effect immediately without a revocation list.

Routes are defined in `usermgmt.api.server`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
