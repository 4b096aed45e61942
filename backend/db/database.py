from collections.abc import AsyncGenerator
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import settings


class Base(DeclarativeBase):
    pass


def _engine_kwargs() -> dict:
    kwargs = {"echo": settings.database_echo}
    if settings.is_sqlite:
        # aiosqlite connections are bound to the loop that opened them
        kwargs["poolclass"] = NullPool
    return kwargs


engine = create_async_engine(settings.database_url, **_engine_kwargs())
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)

if settings.is_sqlite:
    # SQLite ignores ON DELETE rules unless foreign keys are switched on per connection
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


# Register every model on Base.metadata and re-export for routers
from .organization import Organization  # noqa: E402,F401
from .season import Season  # noqa: E402,F401
from .field import Field  # noqa: E402,F401
from .activity import Activity  # noqa: E402,F401
from .inventory.item import InventoryItem  # noqa: E402,F401
from .inventory.movement import InventoryMovement  # noqa: E402,F401
