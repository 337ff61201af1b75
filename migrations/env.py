# 📄 File: migrations/env.py
# 🧭 Purpose (Layman Explanation):
# Tells Alembic how to connect to the database and create or update the species catalog
# and scan history tables safely.
# 🧪 Purpose (Technical Summary):
# Alembic environment configuration running migrations over the application's async engine,
# with model imports for autogenerate and Supabase system-schema filtering.
# 🔗 Dependencies:
# - alembic (migration tool)
# - SQLAlchemy (ORM, async engine)
# - python-dotenv (environment variables)
# - app.shared.config.settings (database URL)
# 🔄 Connected Modules / Calls From:
# - alembic CLI commands (upgrade, downgrade, revision)

import asyncio
import os
import sys
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

# Load environment variables
load_dotenv()

# Add the project root to Python path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from app.shared.config.settings import get_settings
from app.shared.infrastructure.database.connection import Base

# Import all module models to ensure they're included in autogenerate
from app.modules.plant_identification.infrastructure.database.models import (  # noqa: F401
    PlantSpeciesModel,
    ScanRecordModel,
)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

SUPABASE_SCHEMAS = {'auth', 'storage', 'realtime', 'vault', 'extensions'}


def get_database_url() -> str:
    """Database URL from application settings."""
    return get_settings().database_url


def include_object(object, name, type_, reflected, compare_to):
    """Skip Supabase-managed schemas."""
    if getattr(object, 'schema', None) in SUPABASE_SCHEMAS:
        return False
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output."""
    context.configure(
        url=get_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Run migrations over the async engine."""
    connectable = create_async_engine(get_database_url(), poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
