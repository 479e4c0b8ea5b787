from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator

from sqlalchemy.orm import sessionmaker

from app.crm.db import build_engine, build_sessionmaker


@contextmanager
def script_store(db_url: str) -> Generator[sessionmaker, None, None]:
    """
    Store handle for one-off scripts; the engine is disposed on exit.
    """
    engine = build_engine(db_url)
    try:
        yield build_sessionmaker(engine)
    finally:
        engine.dispose()
