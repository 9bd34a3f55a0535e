"""
Alembic migration tests
"""
import importlib.util
import io
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

VERSIONS_DIR = Path(__file__).resolve().parent.parent / "alembic" / "versions"


def load_revision(filename):
    spec = importlib.util.spec_from_file_location(filename[:-3], VERSIONS_DIR / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def initial_revision():
    return load_revision("3c7e1f0a9d42_create_warranty_tables.py")


@pytest.mark.unit
def test_postgresql_upgrade_creates_each_enum_type_once(initial_revision):
    buf = io.StringIO()
    context = MigrationContext.configure(
        dialect_name="postgresql",
        opts={"as_sql": True, "output_buffer": buf},
    )

    with Operations.context(context):
        initial_revision.upgrade()

    sql = buf.getvalue()
    assert sql.count("CREATE TYPE servicestatus") == 1
    assert sql.count("CREATE TYPE actiontype") == 1
    assert sql.count("CREATE TYPE actionchannel") == 1
    assert "CREATE TABLE service_visits" in sql


@pytest.mark.unit
def test_sqlite_upgrade_and_downgrade(initial_revision):
    engine = create_engine("sqlite://")

    with engine.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            initial_revision.upgrade()
        tables = set(inspect(connection).get_table_names())

    assert tables == {
        "machine_models", "machines", "sales", "service_requests", "service_visits", "action_logs",
    }

    with engine.begin() as connection:
        with Operations.context(MigrationContext.configure(connection)):
            initial_revision.downgrade()
        assert inspect(connection).get_table_names() == []

    engine.dispose()
