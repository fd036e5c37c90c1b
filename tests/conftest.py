import importlib
import os
import uuid
from contextlib import contextmanager
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url


def _setup_app(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    os.environ["SECRET_KEY"] = "test-secret"
    os.environ["NOTIFICATIONS_ENABLED"] = "false"

    import app.hotelport.core.config as config
    import app.hotelport.db.session as session
    import app.main as main

    importlib.reload(config)
    importlib.reload(session)
    importlib.reload(main)

    return main.create_app(), session


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


@contextmanager
def _postgres_database(base_url: str):
    """Create a throwaway database next to ``base_url`` and drop it afterwards."""
    url = make_url(base_url)
    name = f"hotelport_test_{uuid.uuid4().hex[:12]}"
    admin = create_engine(url.set(database="postgres"), isolation_level="AUTOCOMMIT", future=True)
    with admin.connect() as conn:
        conn.execute(text(f'CREATE DATABASE "{name}"'))
    try:
        yield url.set(database=name).render_as_string(hide_password=False)
    finally:
        with admin.connect() as conn:
            conn.execute(
                text("SELECT pg_terminate_backend(pid) FROM pg_stat_activity WHERE datname = :name"),
                {"name": name},
            )
            conn.execute(text(f'DROP DATABASE IF EXISTS "{name}"'))
        admin.dispose()


@contextmanager
def _sqlite_database(tmp_path: Path):
    yield f"sqlite+pysqlite:///{tmp_path / 'test.db'}"


@pytest.fixture()
def client(tmp_path: Path):
    database_url = os.getenv("DATABASE_URL", "")
    if database_url.startswith("postgres"):
        database = _postgres_database(database_url)
    else:
        database = _sqlite_database(tmp_path)

    with database as url:
        _run_migrations(url)
        app, session = _setup_app(url)
        with TestClient(app) as client:
            yield client
        session.engine.dispose()


@pytest.fixture()
def db_session(client):
    from app.hotelport.db.session import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
