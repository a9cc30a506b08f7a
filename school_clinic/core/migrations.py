"""Additive schema migrations applied at startup.

Each entry adds one nullable column to an existing table. An entry is applied
only when the inspector reports the column missing, so re-running the list is
a no-op. A failure is fatal and names the column that could not be added.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from alembic.operations import Operations
from alembic.runtime.migration import MigrationContext
from sqlalchemy import Column, String, Text, inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.types import TypeEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMigration:
    table: str
    column: str
    type_: type[TypeEngine] | TypeEngine

    @property
    def key(self) -> str:
        return f"{self.table}.{self.column}"


class MigrationError(RuntimeError):
    """Raised when a column migration fails for a reason other than 'already exists'."""


COLUMN_MIGRATIONS: tuple[ColumnMigration, ...] = (
    ColumnMigration("referrals", "age", Text),
    ColumnMigration("referrals", "gender", Text),
    ColumnMigration("referrals", "history", Text),
    ColumnMigration("referrals", "referral_time", Text),
    ColumnMigration("settings", "daily_closing_time", String(10)),
)


def _existing_columns(connection: Connection, table: str) -> set[str]:
    inspector = inspect(connection)
    if table not in inspector.get_table_names():
        return set()
    return {column["name"] for column in inspector.get_columns(table)}


def pending_migrations(
    engine: Engine,
    migrations: tuple[ColumnMigration, ...] = COLUMN_MIGRATIONS,
) -> list[ColumnMigration]:
    """Return the migrations whose column is not present yet."""
    with engine.connect() as connection:
        return [
            migration
            for migration in migrations
            if migration.column not in _existing_columns(connection, migration.table)
        ]


def apply_column_migrations(
    engine: Engine,
    migrations: tuple[ColumnMigration, ...] = COLUMN_MIGRATIONS,
) -> list[str]:
    """
    Add every missing column from the migration list.

    Returns:
        Keys ("table.column") of the columns added by this call.

    Raises:
        MigrationError: If adding a missing column fails
    """
    applied: list[str] = []
    for migration in pending_migrations(engine, migrations):
        try:
            with engine.begin() as connection:
                operations = Operations(MigrationContext.configure(connection))
                operations.add_column(
                    migration.table,
                    Column(migration.column, migration.type_, nullable=True),
                )
        except Exception as exc:
            raise MigrationError(f"Failed to add column {migration.key}") from exc
        logger.info("Applied column migration %s", migration.key)
        applied.append(migration.key)
    return applied
