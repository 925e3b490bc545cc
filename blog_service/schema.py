"""DDL for the users and posts tables"""

import logging

from blog_service.db_context import DatabaseManager

logger = logging.getLogger(__name__)

# gen_random_uuid() is built in from PostgreSQL 13
CREATE_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        username TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        title TEXT NOT NULL CHECK (btrim(title) <> ''),
        author UUID NOT NULL REFERENCES users (id),
        contents TEXT,
        tags TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS posts_author_idx ON posts (author)",
    "CREATE INDEX IF NOT EXISTS posts_created_at_idx ON posts (created_at)",
)

DROP_STATEMENTS = (
    "DROP TABLE IF EXISTS posts",
    "DROP TABLE IF EXISTS users",
)


async def create_schema(db_name: str = "default"):
    async with DatabaseManager.transaction(db_name) as conn:
        for statement in CREATE_STATEMENTS:
            await conn.execute(statement)
    logger.info("Schema ready on pool '%s'", db_name)


async def drop_schema(db_name: str = "default"):
    async with DatabaseManager.transaction(db_name) as conn:
        for statement in DROP_STATEMENTS:
            await conn.execute(statement)
    logger.info("Schema dropped on pool '%s'", db_name)


async def truncate_all(db_name: str = "default"):
    """Remove every row, keeping the tables"""
    async with DatabaseManager.transaction(db_name) as conn:
        await conn.execute("TRUNCATE TABLE posts, users")
