from __future__ import annotations

from contextlib import contextmanager
from collections.abc import Generator

from flask import Flask, current_app
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


def build_engine(db_url: str, *, statement_timeout_ms: int = 5000) -> Engine:
    """
    Engine for the customer store.

    SQLite gets foreign-key enforcement on every new connection (the addresses
    cascade depends on it) and BEGIN IMMEDIATE so each session is one real
    transaction holding the write lock from its first statement; a second writer
    waits on the busy timeout instead of failing a lock upgrade. PostgreSQL gets
    a per-statement timeout.
    """
    is_postgres = db_url.startswith("postgres")
    is_sqlite = db_url.startswith("sqlite")
    engine_kwargs: dict[str, object] = {
        "future": True,
        "pool_pre_ping": True,
    }
    if is_postgres:
        engine_kwargs.update(
            {
                "pool_recycle": 1800,
                "pool_size": 5,
                "max_overflow": 10,
                "pool_timeout": 30,
                "connect_args": {"options": f"-c statement_timeout={int(statement_timeout_ms)}"},
            }
        )
    elif is_sqlite:
        engine_kwargs["connect_args"] = {
            "timeout": max(statement_timeout_ms, 0) / 1000.0,
            "check_same_thread": False,
        }

    engine = create_engine(db_url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _sqlite_on_connect(dbapi_connection, connection_record):  # type: ignore[no-redef]
            # Hand transaction control to SQLAlchemy (see the "begin" hook below).
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _sqlite_on_begin(conn):  # type: ignore[no-redef]
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=Session,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def init_db(app: Flask) -> None:
    engine = build_engine(
        app.config["DATABASE_URL"],
        statement_timeout_ms=int(app.config.get("DB_STATEMENT_TIMEOUT_MS") or 5000),
    )
    if app.config.get("ENV") != "production":
        @event.listens_for(engine, "checkout")
        def _receive_checkout(dbapi_connection, connection_record, connection_proxy):  # type: ignore[no-redef]
            app.logger.debug("DB connection checkout from pool")
    app.extensions["sqlalchemy_engine"] = engine
    app.extensions["sqlalchemy_sessionmaker"] = build_sessionmaker(engine)


def get_store(app: Flask | None = None) -> sessionmaker:
    """
    The store handle handed to the customer operations.
    """
    if app is None:
        app = current_app
    return app.extensions["sqlalchemy_sessionmaker"]


@contextmanager
def session_scope(store: sessionmaker) -> Generator[Session, None, None]:
    """
    One unit of work: yields a session, commits on success, rolls back on any
    exception and always closes.
    """
    s: Session = store()
    try:
        yield s
        s.commit()
    except Exception:
        s.rollback()
        raise
    finally:
        s.close()
