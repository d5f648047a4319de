"""Shared Alembic runner for the per-service migration environments.

Each service owns a set of tables and its own version table, so the three
services can be migrated independently against one database:

    alembic --name loyalty upgrade head
"""

import asyncio
from logging.config import fileConfig
from typing import Iterable

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from libs.common.config import get_settings
from libs.db.base import Base


def _table_filter(service_tables: frozenset[str]):
    def include_object(obj, name, type_, reflected, compare_to):
        if type_ == "table":
            return name in service_tables
        if type_ in ("index", "column", "foreign_key_constraint", "unique_constraint"):
            return obj.table.name in service_tables
        return True

    return include_object


def run_service_migrations(version_table: str, service_tables: Iterable[str]) -> None:
    """Run offline or online migrations for one service's tables."""
    config = context.config
    if config.config_file_name is not None:
        fileConfig(config.config_file_name)

    # ConfigParser interpolation treats % specially
    config.set_main_option(
        "sqlalchemy.url", get_settings().DATABASE_URL.replace("%", "%%")
    )
    options = {
        "target_metadata": Base.metadata,
        "version_table": version_table,
        "include_object": _table_filter(frozenset(service_tables)),
    }

    if context.is_offline_mode():
        context.configure(
            url=config.get_main_option("sqlalchemy.url"),
            literal_binds=True,
            dialect_opts={"paramstyle": "named"},
            **options,
        )
        with context.begin_transaction():
            context.run_migrations()
        return

    def do_run_migrations(connection: Connection) -> None:
        context.configure(connection=connection, **options)
        with context.begin_transaction():
            context.run_migrations()

    async def run_online() -> None:
        connectable = async_engine_from_config(
            config.get_section(config.config_ini_section, {}),
            prefix="sqlalchemy.",
            poolclass=pool.NullPool,
            # psycopg auto-prepared statements collide behind PgBouncer
            connect_args={"prepare_threshold": 0},
        )
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
        await connectable.dispose()

    asyncio.run(run_online())
