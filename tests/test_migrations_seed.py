import os
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, func, inspect, select
from sqlalchemy.orm import sessionmaker

from app.hotelport.core.config import settings
from app.hotelport.core.permissions import RolePermissions, is_user_super_admin
from app.hotelport.db.models import User, UserRole
from app.hotelport.db.seed import run_seed


def _run_migrations(database_url: str):
    os.environ["DATABASE_URL"] = database_url
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    command.upgrade(config, "head")


def test_migrations_apply(tmp_path: Path):
    db_path = tmp_path / "migrations.db"
    database_url = f"sqlite+pysqlite:///{db_path}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())

    assert {
        "user_roles",
        "users",
        "user_access_records",
        "portfolios",
        "properties",
        "audits",
        "pending_actions",
        "audit_events",
    } <= tables

    indexes = {index["name"] for index in inspector.get_indexes("pending_actions")}
    assert "ix_pending_actions_status_created" in indexes
    unique = {constraint["name"] for constraint in inspector.get_unique_constraints("user_access_records")}
    assert "uq_user_access_records_user_id" in unique


def test_seed_is_idempotent(tmp_path: Path):
    db_path = tmp_path / "seed.db"
    database_url = f"sqlite+pysqlite:///{db_path}"
    _run_migrations(database_url)

    engine = create_engine(database_url, future=True)
    SessionLocal = sessionmaker(bind=engine, future=True)

    with SessionLocal() as db:
        run_seed(db)
        roles_count = db.scalar(select(func.count()).select_from(UserRole))
        users_count = db.scalar(select(func.count()).select_from(User))

        run_seed(db)
        assert db.scalar(select(func.count()).select_from(UserRole)) == roles_count
        assert db.scalar(select(func.count()).select_from(User)) == users_count

        admin = db.execute(select(User).where(User.email == settings.SUPERADMIN_EMAIL)).scalars().one()
        assert is_user_super_admin(RolePermissions.from_role(admin.role))
