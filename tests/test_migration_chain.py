"""Sanity checks for Alembic migrations.

The versions directory must form a single linear upgrade path, and the
migrated schema must carry every table and column the models declare.
"""
from pathlib import Path

import pytest
from alembic.config import Config as AlembicConfig
from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from profile_economy.database import Base
import profile_economy.models  # noqa: F401


BASE_DIR = Path(__file__).resolve().parents[1]


def test_migrations_have_single_head() -> None:
    script = ScriptDirectory.from_config(AlembicConfig(str(BASE_DIR / "alembic.ini")))

    heads = script.get_heads()
    assert len(heads) == 1, f"Multiple migration heads detected: {heads}"

    chain = list(script.walk_revisions())
    assert chain[-1].down_revision is None


def test_alembic_config_uses_path_separator() -> None:
    config = AlembicConfig(str(BASE_DIR / "alembic.ini"))

    assert config.get_main_option("path_separator") == "os"
    assert config.get_main_option("version_path_separator") is None


@pytest.mark.asyncio
async def test_migrated_schema_matches_models(test_engine) -> None:
    def _describe(sync_conn):
        inspector = inspect(sync_conn)
        return {
            table: {
                "columns": {column["name"] for column in inspector.get_columns(table)},
                "indexes": {index["name"] for index in inspector.get_indexes(table)},
            }
            for table in inspector.get_table_names()
        }

    async with test_engine.connect() as conn:
        migrated = await conn.run_sync(_describe)

    for table in Base.metadata.sorted_tables:
        assert table.name in migrated, f"Missing table {table.name}"
        assert migrated[table.name]["columns"] == {column.name for column in table.columns}
        model_indexes = {index.name for index in table.indexes}
        assert model_indexes <= migrated[table.name]["indexes"]
