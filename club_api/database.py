"""
Database connection and session management for SQLAlchemy 2.0.
Configured for async operations against PostgreSQL (asyncpg) or SQLite (aiosqlite).

The engine and its connection pool live on a Database object that is built
once per application and carried by the AppContext stored on app.state.
"""
from dataclasses import dataclass
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy import text
from fastapi import Depends, Request
from typing import AsyncIterator
from urllib.parse import urlparse
import logging
import socket

from club_api.config import Settings

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


def mask_database_url(url: str) -> str:
    """Hide the password part of a database URL so it can be logged."""
    at_pos = url.rfind("@")
    if at_pos == -1:
        return url
    colon_pos = url.rfind(":", 0, at_pos)
    scheme_end = url.find("://")
    if colon_pos == -1 or colon_pos <= scheme_end:
        return url
    return f"{url[:colon_pos]}:****@{url[at_pos + 1:]}"


def _validate_database_url(url: str) -> tuple[bool, str]:
    """
    Validate database URL and provide diagnostic information.
    Returns (is_valid, diagnostic_message)
    """
    if not url:
        return False, "DATABASE_URL is empty"

    try:
        parsed = urlparse(url)

        if url.startswith("sqlite"):
            return True, f"SQLite database: {parsed.path or ':memory:'}"

        if not url.startswith(("postgresql://", "postgresql+asyncpg://")):
            return False, f"Invalid database URL scheme. Expected postgresql+asyncpg:// or sqlite+aiosqlite://, got: {parsed.scheme}"

        hostname = parsed.hostname
        if not hostname:
            return False, "No hostname found in DATABASE_URL"

        try:
            socket.getaddrinfo(hostname, None)
            dns_status = "DNS resolution successful"
        except socket.gaierror as e:
            dns_status = f"DNS resolution failed: {str(e)}. This may indicate network connectivity issues or incorrect hostname."

        return True, f"URL format valid. Hostname: {hostname}, Port: {parsed.port or 5432}, Database: {parsed.path or '/postgres'}. {dns_status}"

    except ValueError as e:
        return False, f"Error parsing DATABASE_URL: {str(e)}"


def _engine_arguments(url: str, settings: Settings) -> dict:
    """Build engine keyword arguments for the configured backend."""
    engine_args = {"echo": settings.DB_ECHO}

    if url.startswith("postgresql"):
        engine_args.update({
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_pre_ping": True,  # Verify connections before using (handles stale connections)
            "pool_recycle": 3600,
            "connect_args": {
                "server_settings": {
                    "application_name": "club-backend"
                }
            }
        })
    elif url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:")):
        # One shared connection, otherwise every session sees its own empty database
        engine_args.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })

    return engine_args


class Database:
    """
    Owns the async engine (and therefore the connection pool) and the session factory.
    """

    def __init__(self, settings: Settings):
        self.url = settings.DATABASE_URL or SQLITE_MEMORY_URL
        self.engine = create_async_engine(self.url, **_engine_arguments(self.url, settings))
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    @property
    def masked_url(self) -> str:
        return mask_database_url(self.url)

    async def connect(self) -> None:
        """
        Verify the database is reachable.
        Logs a diagnostic for the common failure modes and re-raises.
        """
        is_valid, diagnostic = _validate_database_url(self.url)
        if not is_valid:
            logger.error(f"Invalid DATABASE_URL: {diagnostic}")
            raise ValueError(f"Invalid DATABASE_URL: {diagnostic}")

        logger.info(f"Database URL validation: {diagnostic}")

        try:
            async with self.engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
                logger.info("Database connection initialized successfully")
        except Exception as e:
            error_msg = str(e)
            error_type = type(e).__name__

            if "getaddrinfo failed" in error_msg or "11001" in error_msg:
                logger.error(
                    f"Database connection failed - DNS resolution error: {error_msg}\n"
                    f"Diagnostic: {diagnostic}"
                )
            elif "connection refused" in error_msg.lower() or "connection timeout" in error_msg.lower():
                logger.error(
                    f"Database connection failed - Connection refused/timeout: {error_msg}\n"
                    f"Diagnostic: {diagnostic}"
                )
            elif "authentication failed" in error_msg.lower() or "password" in error_msg.lower():
                logger.error(
                    f"Database connection failed - Authentication error: {error_msg}\n"
                    f"Diagnostic: {diagnostic}"
                )
            else:
                logger.error(
                    f"Database connection failed ({error_type}): {error_msg}\n"
                    f"Diagnostic: {diagnostic}"
                )
            raise

    async def create_all(self) -> None:
        """Create all tables known to the ORM metadata."""
        # Register the models on Base.metadata
        from club_api import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def ping(self):
        async with self.engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
            return result.scalar()

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")


@dataclass
class AppContext:
    """Process-wide state built once at startup and handed to every request."""
    settings: Settings
    database: Database


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application context."""
    return request.app.state.context


def get_app_settings(context: AppContext = Depends(get_context)) -> Settings:
    return context.settings


async def get_db(context: AppContext = Depends(get_context)) -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency for database sessions.
    One session per request; rolled back on error and always closed,
    which hands the connection back to the pool.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(db: AsyncSession = Depends(get_db)):
            pass
    """
    async with context.database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
