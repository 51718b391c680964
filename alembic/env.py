# alembic/env.py
from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine

# repo root → importable `minigram`
BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.insert(0, str(BASE_DIR))

from minigram.core.config import settings  # noqa: E402
from minigram.db.base import Base  # noqa: E402
import minigram.db.init_db  # noqa: E402,F401  (registra users + posts)

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def sync_url(url: str) -> str:
    """
    La app corre con drivers async; alembic necesita uno síncrono.

        postgresql+asyncpg://… → postgresql+psycopg://…
        postgresql://…         → postgresql+psycopg://…
        sqlite+aiosqlite://…   → sqlite://…
    """
    if "+aiosqlite" in url:
        return url.replace("+aiosqlite", "", 1)
    if "+asyncpg" in url:
        return url.replace("+asyncpg", "+psycopg", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def target_url() -> str:
    # `alembic -x url=sqlite:///dev.db upgrade head` pisa DATABASE_URL
    return sync_url(context.get_x_argument(as_dictionary=True).get("url") or settings.DATABASE_URL)


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        # sqlite no soporta ALTER de constraints: batch mode
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    url = target_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = target_url()
    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            _configure(url, connection=connection)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
