"""Tests for Alembic database migrations."""
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def alembic_cfg(tmp_path, monkeypatch):
    db_path = tmp_path / "migrations.db"
    monkeypatch.setenv("APP__DB_DSN", f"sqlite+aiosqlite:///{db_path}")

    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.attributes["configure_logger"] = False
    return cfg, db_path


def table_names(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def columns(db_path, table):
    engine = create_engine(f"sqlite:///{db_path}")
    try:
        return [col["name"] for col in inspect(engine).get_columns(table)]
    finally:
        engine.dispose()


def test_upgrade_creates_all_tables(alembic_cfg):
    cfg, db_path = alembic_cfg
    command.upgrade(cfg, "head")

    assert table_names(db_path) == {
        "customers", "products", "orders", "order_items", "alembic_version"
    }


def test_upgrade_creates_persisted_order_shape(alembic_cfg):
    cfg, db_path = alembic_cfg
    command.upgrade(cfg, "head")

    assert columns(db_path, "orders") == ["id", "customer_id", "total"]
    assert columns(db_path, "order_items") == [
        "id", "name", "price", "quantity", "order_id", "product_id"
    ]


def test_downgrade_removes_all_tables(alembic_cfg):
    cfg, db_path = alembic_cfg
    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    assert table_names(db_path) == {"alembic_version"}


def test_upgrade_twice_is_noop(alembic_cfg):
    cfg, db_path = alembic_cfg
    command.upgrade(cfg, "head")
    command.upgrade(cfg, "head")

    assert "orders" in table_names(db_path)
