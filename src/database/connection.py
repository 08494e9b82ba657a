from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.database.models import Base
from src.utils.logger import get_logger
from src.utils.settings.database import DatabaseSettings

logger = get_logger(__name__)


def _set_sqlite_pragmas(dbapi_conn, _connection_record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_async_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create the async engine for the configured backend."""
    settings = settings or DatabaseSettings()
    url = settings.DATABASE_URL_ASYNC

    if not settings.is_sqlite:
        return create_async_engine(
            url, echo=settings.DATABASE_ECHO, pool_pre_ping=True
        )

    db_path = url.split(":///", 1)[-1]
    if db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(url, echo=settings.DATABASE_ECHO)
    event.listen(engine.sync_engine, "connect", _set_sqlite_pragmas)
    return engine


async_engine = build_async_engine()
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)


async def init_db(engine: AsyncEngine = async_engine) -> None:
    """Create the api_keys table and its indexes if they do not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized", url=engine.url.render_as_string())

