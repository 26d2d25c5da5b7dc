"""
Database configuration and session management for Coursehub.

Sets up the SQLAlchemy async engine, session factory and base model, and
provides transactional scopes that store operations join automatically.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar

from sqlalchemy import MetaData, text
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm.exc import StaleDataError

from .config import Settings
from .errors import ConflictError, TransientError


# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")


# SQLAlchemy metadata conventions for better constraint naming
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


# Base class for models
Base = declarative_base(metadata=metadata)


@asynccontextmanager
async def translate_store_errors(action: str) -> AsyncIterator[None]:
    """
    Map driver and SQLAlchemy failures onto the core error kinds.

    The raw driver message is logged; callers only ever see the generic one.
    """
    try:
        yield
    except IntegrityError as exc:
        logger.warning(f"Integrity violation during {action}: {exc.orig}")
        raise ConflictError(
            "The change conflicts with existing data, please retry",
            retryable=True
        ) from exc
    except StaleDataError as exc:
        logger.info(f"Concurrent write detected during {action}: {exc}")
        raise ConflictError(
            "The record was changed by another request, please retry",
            retryable=True
        ) from exc
    except (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError, OSError) as exc:
        logger.error(f"Data store unavailable during {action}: {exc}")
        raise TransientError("Data store unavailable") from exc
    except DBAPIError as exc:
        if exc.connection_invalidated:
            logger.error(f"Connection invalidated during {action}: {exc}")
            raise TransientError("Data store unavailable") from exc
        logger.error(f"Data store rejected {action}: {exc}")
        raise TransientError("Data store request failed") from exc


@dataclass
class _TransactionScope:
    session: AsyncSession
    lock: asyncio.Lock


class Database:
    """
    Owns the engine and session factory for one configured data store.

    Store calls made inside ``transaction()`` share its session; outside of
    it every call gets its own short-lived session.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        url = settings.database_url_async
        if settings.is_sqlite:
            self.engine = create_async_engine(url, echo=settings.DEBUG)
        else:
            self.engine = create_async_engine(
                url,
                pool_pre_ping=True,  # Verify connections before using
                pool_size=10,        # Number of connections to maintain
                max_overflow=20,     # Maximum overflow connections
                echo=settings.DEBUG, # Log SQL statements if in debug mode
            )
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._scope: ContextVar[Optional[_TransactionScope]] = ContextVar(
            f"coursehub_transaction_{id(self)}", default=None
        )

    @property
    def in_transaction(self) -> bool:
        return self._scope.get() is not None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yield the session for a single store operation.

        Joins the enclosing transaction when there is one, otherwise opens
        a session that commits on success.
        """
        scope = self._scope.get()
        if scope is not None:
            async with scope.lock:
                yield scope.session
            return

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except BaseException:
                await session.rollback()
                raise

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Run the enclosed store operations all-or-nothing.

        Nested calls join the outer transaction.
        """
        scope = self._scope.get()
        if scope is not None:
            yield scope.session
            return

        async with translate_store_errors("transaction"):
            async with self.session_factory() as session:
                async with session.begin():
                    token = self._scope.set(_TransactionScope(session, asyncio.Lock()))
                    try:
                        yield session
                    finally:
                        self._scope.reset(token)

    async def run_transaction(self, work: Callable[[], Awaitable[T]], attempts: Optional[int] = None) -> T:
        """
        Run ``work`` in a transaction, starting over when it loses a race.

        A retryable ConflictError (another request wrote the same rows
        first) rolls the transaction back and runs ``work`` again from its
        first read, up to ``attempts`` times. Inside an enclosing
        transaction ``work`` runs once and conflicts go to the outer caller.
        """
        if self.in_transaction:
            return await work()

        attempts = attempts or self.settings.TRANSACTION_RETRY_ATTEMPTS
        for attempt in range(1, attempts):
            try:
                async with self.transaction():
                    return await work()
            except ConflictError as exc:
                if not exc.retryable:
                    raise
                logger.info(f"Write conflict, retrying transaction ({attempt}/{attempts})")

        async with self.transaction():
            return await work()

    async def create_all(self) -> None:
        """Create all database tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("All database tables created successfully")

    async def drop_all(self) -> None:
        """Drop all database tables. USE WITH CAUTION!"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("All database tables dropped")

    async def check_connection(self) -> bool:
        """
        Check if database is accessible.

        Returns:
            bool: True if database is accessible, False otherwise
        """
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (DBAPIError, OSError) as e:
            logger.error(f"Database connection failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
