"""Create an account in the configured DB.

Usage:
  python scripts/create_user.py --name Alice --email alice@example.com --password '...'

NOTE: This is intended for local/dev.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from usermgmt.auth.crud import STATUS_ACTIVE, STATUS_BLOCKED, create_user
from usermgmt.config import load_config
from usermgmt.db import connect, init_db


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--name", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--blocked", action="store_true", help="create the account already blocked")
    args = ap.parse_args()

    cfg = load_config()
    init_db(cfg.DB_DSN)

    with connect(cfg.DB_DSN) as conn:
        u = create_user(
            conn,
            name=args.name,
            email=args.email,
            password=args.password,
            status=STATUS_BLOCKED if args.blocked else STATUS_ACTIVE,
        )

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
