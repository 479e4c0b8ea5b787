"""
Local/dev helper: create the customer tables directly from the models.

Production schemas are managed by Alembic (scripts/release.py); this is for a
fresh SQLite file or a throwaway database.

Usage:
  python scripts/init_db.py
"""

import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

from app.crm.db import build_engine
from app.crm.models import Base


def create_tables(*, database_url: str | None = None) -> None:
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///customers.db").strip()
    engine = build_engine(db_url)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()
    print(f"Tables ready on {engine.url.render_as_string(hide_password=True)}", flush=True)


def main() -> None:
    load_dotenv()
    create_tables()


if __name__ == "__main__":
    main()
