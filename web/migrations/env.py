"""Alembic environment for the ``bookings`` schema.

Run from ``web/``::

    alembic revision --autogenerate -m "add column"
    alembic upgrade head

The DSN comes from ``DB_DSN`` (the same setting the API uses); the asyncpg
driver suffix is dropped because migrations run synchronously via psycopg2.
"""

import os
import sys
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

WEB_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if WEB_DIR not in sys.path:
    sys.path.append(WEB_DIR)

from booking_api.core import get_settings  # noqa: E402
from booking_api.models import Base  # noqa: E402

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def sync_dsn() -> str:
    return get_settings().DB_DSN.replace("+asyncpg", "", 1)


def run_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    context.configure(
        url=sync_dsn(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(sync_dsn(), poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)
        with context.begin_transaction():
            context.run_migrations()
    engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
