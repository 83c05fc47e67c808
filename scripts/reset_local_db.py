"""Utility script to reset the local SQL backing store.

Usage:
    STORE_BACKEND=sql DATABASE_URL=sqlite:///local.db python scripts/reset_local_db.py

Environment:
    Requires STORE_BACKEND=sql and DATABASE_URL in the current shell.
"""

from __future__ import annotations

from workflow_retry_proxy.config import get_settings
from workflow_retry_proxy.store import SqlStore


def reset_database() -> None:
    settings = get_settings()
    if settings.store_backend != "sql":
        raise SystemExit("reset_local_db only applies to STORE_BACKEND=sql")

    store = SqlStore(settings.database_url)
    store.drop_schema()
    store.create_schema()
    print("Local database reset.")


if __name__ == "__main__":
    reset_database()
