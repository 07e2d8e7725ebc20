from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import ssl
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.util import immutabledict

from localegen.core.config import AppSettings
from localegen.core.migrations import migrate_database


def prepare_engine_arguments(database_url: str) -> tuple[str, dict[str, Any]]:
    """Normalize the URL and translate sslmode for asyncpg engines."""
    url = make_url(database_url)
    drivername = url.drivername or ""
    if "asyncpg" not in drivername:
        return database_url, {}

    query = dict(url.query)
    sslmode = query.pop("sslmode", None)
    connect_args: dict[str, Any] = {}

    if sslmode:
        ssl_value = _sslmode_to_asyncpg_ssl(sslmode)
        if ssl_value is not None:
            connect_args["ssl"] = ssl_value

    sanitized_url = url.set(query=immutabledict(query))
    return sanitized_url.render_as_string(hide_password=False), connect_args


def _sslmode_to_asyncpg_ssl(sslmode: str) -> Any:
    """Map libpq-style sslmode to asyncpg ssl argument."""
    normalized = sslmode.lower()
    if normalized == "disable":
        return False
    if normalized in {"allow", "prefer"}:
        return None
    if normalized in {"require", "verify-full"}:
        return True
    if normalized == "verify-ca":
        context = ssl.create_default_context()
        context.check_hostname = False
        return context

    raise ValueError(f"Unsupported sslmode '{sslmode}' for asyncpg.")


def create_engine_and_session_factory(
    settings: AppSettings,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is not configured.")

    database_url, connect_args = prepare_engine_arguments(settings.database_url)
    engine_kwargs: dict[str, Any] = {"future": True}
    if connect_args:
        engine_kwargs["connect_args"] = connect_args

    engine = create_async_engine(database_url, **engine_kwargs)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    return engine, session_factory


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def check_database(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Run a trivial query; raises if the database is unreachable."""
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))


async def init_database(settings: AppSettings) -> None:
    """Ensure the database schema is up to date via Alembic migrations."""
    await migrate_database(settings)
