import logging
from typing import Any
import asyncpg
from ..config import settings

logger = logging.getLogger(__name__)


class PostgresDB:
    _pool = None

    @classmethod
    async def initialize_pool(cls, min_size=5, max_size=10):
        """Initialize a connection pool once during startup"""
        if cls._pool is None:
            try:
                cls._pool = await asyncpg.create_pool(
                    settings.POSTGRES_DATABASE_URL,
                    min_size=min_size,
                    max_size=max_size,
                    command_timeout=60,
                    max_inactive_connection_lifetime=300
                )
                logger.info("PostgreSQL connection pool initialized")
            except Exception as e:
                logger.error(f"Error initializing PostgreSQL connection pool: {str(e)}")
                raise
        return cls._pool

    @classmethod
    async def close_pool(cls):
        """Close the connection pool during shutdown"""
        if cls._pool:
            await cls._pool.close()
            cls._pool = None
            logger.info("PostgreSQL connection pool closed")

    @classmethod
    async def get_pool(cls):
        """Get the connection pool, initializing if necessary"""
        if cls._pool is None:
            await cls.initialize_pool()
        return cls._pool

    @classmethod
    async def execute_query(cls, query: str, params: Any = None) -> list:
        """Execute a query and return results"""
        pool = await cls.get_pool()
        try:
            async with pool.acquire() as connection:
                if params is None:
                    results = await connection.fetch(query)
                else:
                    results = await connection.fetch(query, *params)
                return [dict(row) for row in results]
        except Exception as e:
            logger.error(f"Error executing query: {str(e)}")
            raise
