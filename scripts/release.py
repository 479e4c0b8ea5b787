"""
Bring the customer database schema to the latest Alembic revision, then report
any customer whose addresses do not carry exactly one primary.

    python scripts/release.py

DATABASE_URL is mandatory here; with ENV=production it must not point at SQLite.
Primary-address problems are printed but do not fail the release; repair them
with scripts/check_primary_addresses.py --fix.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _database_url() -> str:
    url = (os.environ.get("DATABASE_URL") or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL is not set; refusing to migrate an implicit database.")
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production") and url.startswith("sqlite"):
        raise RuntimeError("ENV=production needs a PostgreSQL DATABASE_URL, got sqlite.")
    return url


def alembic_config(db_url: str):
    from alembic.config import Config

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", db_url)
    return cfg


def run_release() -> list[tuple[str, int]]:
    """Upgrade to head; returns the primary-address violations found afterwards."""
    from alembic import command

    from app.crm.modules.customers.service import find_primary_violations
    from scripts._db_utils import script_store

    db_url = _database_url()
    print("[release] upgrading schema to head", flush=True)
    command.upgrade(alembic_config(db_url), "head")

    with script_store(db_url) as store:
        violations = find_primary_violations(store)
    if violations:
        print(f"[release] {len(violations)} customer(s) without exactly one primary address", flush=True)
    else:
        print("[release] schema current, primary addresses consistent", flush=True)
    return violations


def main() -> None:
    run_release()


if __name__ == "__main__":
    main()
