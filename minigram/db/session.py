# minigram/db/session.py
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from minigram.db.base import Base


def engine_options(db_url: str) -> dict:
    """
    Opciones del engine según el driver.
    Timeouts cortos: si la DB no responde → falla rápido (5s).
    """
    if db_url.startswith("sqlite+aiosqlite"):
        opts: dict = {"connect_args": {"check_same_thread": False}}
        # :memory: vive en una sola conexión; hay que compartirla
        if ":memory:" in db_url or db_url.rstrip("/").endswith("sqlite+aiosqlite:"):
            opts["poolclass"] = StaticPool
        return opts

    if db_url.startswith("postgresql+psycopg"):
        connect_args = {"connect_timeout": 5}
    elif db_url.startswith("postgresql+asyncpg"):
        connect_args = {
            "timeout": 5,
            "server_settings": {"client_encoding": "UTF8"},
        }
    else:
        connect_args = {}

    return {
        "pool_pre_ping": True,
        "pool_recycle": 300,
        "pool_size": 5,
        "max_overflow": 10,
        "connect_args": connect_args,
    }


class Database:
    """
    Handle del store: dueño del engine y de la fábrica de sesiones.
    Se crea en el lifespan de la app y se cierra al apagar.
    """

    def __init__(self, url: str, **overrides):
        self.url = url
        options = engine_options(url)
        options.update(overrides)
        self.engine = create_async_engine(url, **options)
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    # lo no commiteado se descarta (rollback) al cerrar la sesión
    database: Database = request.app.state.db
    async with database.sessionmaker() as session:
        try:
            yield session
        finally:
            await session.close()
