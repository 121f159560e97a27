"""Alembic environment. Migrations run synchronously through psycopg2."""

import os
from logging.config import fileConfig

from sqlalchemy import Connection, create_engine, pool, text
from sqlmodel import SQLModel

from alembic import context
from src.safeops import models  # noqa: F401  registers tables on SQLModel.metadata
from src.safeops.core.config import get_settings

if context.config.config_file_name and os.path.exists(context.config.config_file_name):
    fileConfig(context.config.config_file_name)

target_metadata = SQLModel.metadata


def sync_url() -> str:
    return get_settings().database_url.replace("postgresql+asyncpg", "postgresql")


def migrate(connection: Connection) -> None:
    # Row-level tenancy: one schema for every tenant.
    connection.execute(text("SET search_path TO public"))
    connection.commit()
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        version_table_schema="public",
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


if context.is_offline_mode():
    context.configure(
        url=sync_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()
else:
    engine = create_engine(sync_url(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        migrate(connection)
    engine.dispose()
