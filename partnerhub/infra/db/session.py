"""
Database session management.

The engine and session factory belong to a Database object that is built
from Settings and handed to whoever needs it (app.state, CLI, tests).
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from partnerhub.config import Settings


class Database:
    """Owns one async engine and its session factory."""
    
    def __init__(self, url: str, echo: bool = False, engine: Optional[AsyncEngine] = None):
        self.url = url
        if engine is None:
            kwargs = {}
            # In-memory SQLite lives inside a single connection
            if url.startswith("sqlite") and (":memory:" in url or url.endswith("://")):
                kwargs = {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
            engine = create_async_engine(url, echo=echo, future=True, **kwargs)
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )
    
    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.database_url, echo=settings.debug)
    
    async def create_all(self) -> None:
        """Create all tables."""
        from partnerhub.infra.db.models import Base
        
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    
    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
    
    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session as async context manager."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for FastAPI routes."""
    database: Database = request.app.state.db
    async with database.session() as session:
        yield session
