"""Alembic environment for the helpdesk schema (users, tickets, ticket_comments)."""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine
from sqlalchemy.pool import NullPool

# Migrations only need the database URL; the remaining required settings get
# placeholders so `alembic upgrade` works without a full application .env.
os.environ.setdefault("APP_ENV", "dev")
for _name in ("JWT_SECRET", "MAIL_HOST", "MAIL_USERNAME", "MAIL_PASSWORD"):
    os.environ.setdefault(_name, "unused-by-migrations")

from app.core.config import settings
from app.models import Base

# Import all models so that Base.metadata contains every table.
from app.models import Ticket, TicketComment, User  # noqa: F401

config = context.config
if config.config_file_name is not None:
    try:
        fileConfig(config.config_file_name)
    except KeyError:
        pass

target_metadata = Base.metadata


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL for the configured dialect without connecting."""
    url = settings.DATABASE_URL
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect and apply migrations; SQLite uses batch mode for ALTERs."""
    url = settings.DATABASE_URL
    connectable = create_engine(url, poolclass=NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=_is_sqlite(url),
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
