from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession
from sqlalchemy.orm import sessionmaker

from wapwatch.core.config import settings
from wapwatch.db.base import Base


def create_db_engine(url: str, busy_timeout_ms: int = settings.SQLITE_BUSY_TIMEOUT_MS) -> AsyncEngine:
    """
    Создаёт асинхронный движок SQLite с нужными PRAGMA на каждом соединении.

    pysqlite/aiosqlite сами решают, когда слать BEGIN, и ломают SAVEPOINT;
    поэтому драйверный BEGIN отключён и транзакцию открываем явно.
    """
    engine = create_async_engine(url, echo=False, future=True)

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)}")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine) -> None:
    """Создаёт таблицы и индексы, если их ещё нет."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Асинхронный движок
async_engine = create_db_engine(settings.DATABASE_URL)

AsyncSessionLocal = create_session_factory(async_engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Сессия на запрос для read-only API."""
    async with AsyncSessionLocal() as session:
        yield session
