"""
Alembic Migration Environment
==============================

What:  Runs ParcelBD schema migrations (parcels, paymentHistory).
How:   Online mode borrows the application's own `Database` engine, so
       migrations connect exactly the way the server does; offline mode
       renders SQL for DATABASE_URL without connecting.
Who:   `alembic upgrade head` before starting the server with DB_CREATE_ALL=false.

SQLite runs in batch mode (ALTER TABLE there can only add columns).
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from parcelbd.config import settings
from parcelbd.database import Base, Database

# Importing the models registers their tables on Base.metadata.
from parcelbd.models.parcel import Parcel  # noqa: F401
from parcelbd.models.payment import PaymentRecord  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = settings.database_url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=database_url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    database = Database(database_url)
    try:
        async with database.engine.connect() as connection:
            await connection.run_sync(_migrate)
            await connection.commit()
    finally:
        await database.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
