"""
SQLAlchemy database models and configuration.

Two tables: tasks and runs. Times are stored as integer epoch seconds.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import logging

from sqlalchemy import Integer, Text, ForeignKey, Index
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from wk.domain.errors import StorageUnavailable, SchemaError, QueryError

logger = logging.getLogger(__name__)


# Base class for all models
class Base(DeclarativeBase):
    pass


class TaskModel(Base):
    """SQLAlchemy model for Task entity"""
    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, unique=True, nullable=False)


class RunModel(Base):
    """SQLAlchemy model for Run entity"""
    __tablename__ = "runs"
    __table_args__ = (
        Index("ix_runs_end_time", "end_time"),
        Index("ix_runs_start_time", "start_time"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(Integer, ForeignKey("tasks.id"), nullable=False)
    start_time: Mapped[int] = mapped_column(Integer, nullable=False)
    end_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class DatabaseEngine:
    """
    Manages database connection and session lifecycle.

    One instance per process. dispose() releases the connection pool and
    forgets the instance so the next get_instance() starts fresh.
    """
    _instance: Optional['DatabaseEngine'] = None

    def __init__(self, db_url: str):
        self.url = db_url
        self.engine = create_async_engine(db_url, echo=False)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

    @classmethod
    def get_instance(cls, db_url: Optional[str] = None) -> 'DatabaseEngine':
        """Get or create the database engine instance"""
        if cls._instance is None:
            if db_url is None:
                from wk.infra.config import get_settings
                db_url = get_settings().get_db_url()
            cls._instance = cls(db_url)
        return cls._instance

    async def create_tables(self):
        """Create all tables in the database (idempotent)"""
        try:
            conn = await self.engine.connect()
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Cannot open database {self.url}: {e}") from e

        try:
            async with conn.begin():
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise SchemaError(f"Cannot create tables: {e}") from e
        finally:
            await conn.close()
        logger.debug(f"Schema ready at {self.url}")

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Fresh session inside a single transaction.

        Commits on normal exit, rolls back on any exception. Storage-layer
        failures surface as QueryError.
        """
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as e:
            raise QueryError(f"Database operation failed: {e}") from e

    async def dispose(self):
        await self.engine.dispose()
        if DatabaseEngine._instance is self:
            DatabaseEngine._instance = None


# Convenience functions
def get_engine(db_url: Optional[str] = None) -> DatabaseEngine:
    """Get the database engine instance"""
    return DatabaseEngine.get_instance(db_url)
