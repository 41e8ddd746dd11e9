"""
Alembic environment configuration for the phone_confirmable migrations.

This script sets up the migration context, connects to the database using
settings.DATABASE_URL and defines the target metadata for the SQLModel
models. Migrations run on a synchronous driver, so the asyncpg URL used by
the application is rewritten to psycopg2.
"""
from logging.config import fileConfig  # For configuring logging

from sqlalchemy import engine_from_config, pool  # For database connection
from sqlmodel import SQLModel  # For metadata

from alembic import context  # For migration context
from phone_confirmable.core.config.settings import settings
from phone_confirmable.domain.entities.user import User  # noqa: F401  registers the users table

# Alembic Config object, provides access to alembic.ini
config = context.config

# Same database as the application, through a sync driver
config.set_main_option(
    "sqlalchemy.url",
    settings.DATABASE_URL.replace("+asyncpg", "+psycopg2"),
)

# Configure logging from alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode, generating SQL scripts without a database connection.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,  # Use literal SQL values
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode against settings.DATABASE_URL.

    Uses a non-pooled connection to avoid conflicts during migrations.
    """
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
