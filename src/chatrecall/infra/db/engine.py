"""Async SQLAlchemy engine and session factory.

``build_db`` runs in the application lifespan: it creates the engine +
session factory, attaches them to ``app.state``, and disposes the engine
on shutdown.  Per-request dependencies read from ``app.state``.
"""

from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from chatrecall.configs.system import ThirdPartyConfig
from chatrecall.infra.telemetry import instrument_sqlalchemy


async def build_db(
    app: FastAPI, config: ThirdPartyConfig
) -> AsyncGenerator[None, None]:
    """Create engine + session factory, attach to ``app.state``."""
    engine = create_async_engine(
        config.postgres_uri,
        pool_pre_ping=True,
        pool_size=config.postgres_pool_size,
        max_overflow=config.postgres_max_overflow,
    )
    instrument_sqlalchemy(engine)
    factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
        engine, expire_on_commit=False
    )
    app.state.engine = engine
    app.state.session_factory = factory
    yield
    await engine.dispose()


def get_session_factory(
    request: Request,
) -> async_sessionmaker[AsyncSession]:
    """Return the ``async_sessionmaker`` from ``app.state``."""
    return request.app.state.session_factory
