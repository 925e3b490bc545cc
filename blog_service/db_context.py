import logging
import traceback
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import wraps
from typing import TYPE_CHECKING, Any

import asyncpg

from blog_service.errors import StoreError

if TYPE_CHECKING:
    from blog_service.config import Settings

logger = logging.getLogger(__name__)

# One connection per context; nested transactions reuse it
_current_connection: ContextVar[asyncpg.Connection | None] = ContextVar(
    "current_connection", default=None
)
_db_pools: dict[str, asyncpg.Pool] = {}


@dataclass
class QueryLog:
    """A statement executed while tracking was enabled"""

    query: str
    params: list[Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    stack_trace: str | None = None


class QueryTracker:
    """Collects the statements executed during a context"""

    def __init__(self):
        self.queries: list[QueryLog] = []
        self._enabled: bool = False

    def enable(self):
        self._enabled = True

    def disable(self):
        self._enabled = False

    def is_enabled(self) -> bool:
        return self._enabled

    def log_query(self, query: str, params: list[Any], stack_trace: str | None = None):
        if self._enabled:
            self.queries.append(
                QueryLog(query=query, params=params, stack_trace=stack_trace)
            )

    def get_queries(self) -> list[QueryLog]:
        """Return a copy of the statements logged so far"""
        return self.queries.copy()

    def clear(self):
        self.queries.clear()

    def count(self) -> int:
        return len(self.queries)

    def to_dict(self) -> list[dict[str, Any]]:
        return [
            {
                "query": log.query,
                "params": log.params,
                "timestamp": log.timestamp.isoformat(),
                "stack_trace": log.stack_trace,
            }
            for log in self.queries
        ]


_query_tracker: ContextVar[QueryTracker | None] = ContextVar(
    "query_tracker", default=None
)


class DatabaseManager:
    """Registry of named asyncpg pools and the per-context connection.

    The store handle is created explicitly at startup:

        await DatabaseManager.connect(dsn, "default")
        ...
        await DatabaseManager.disconnect("default")
    """

    @classmethod
    async def connect(
        cls, dsn: str, name: str = "default", min_size: int = 1, max_size: int = 10
    ) -> asyncpg.Pool:
        """Create a pool for `dsn` and register it under `name`"""
        pool = await asyncpg.create_pool(dsn, min_size=min_size, max_size=max_size)
        await cls.add_pool(name, pool)
        logger.info("Connected pool '%s' (min=%d, max=%d)", name, min_size, max_size)
        return pool

    @classmethod
    async def connect_from_settings(cls, settings: "Settings") -> asyncpg.Pool:
        return await cls.connect(
            settings.database_url,
            settings.db_name,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )

    @classmethod
    async def disconnect(cls, name: str = "default"):
        """Close and unregister a pool. Unknown names are ignored."""
        pool = _db_pools.pop(name, None)
        if pool is None:
            return
        await pool.close()
        logger.info("Closed pool '%s'", name)

    @classmethod
    async def add_pool(cls, name: str, pool: asyncpg.Pool):
        _db_pools[name] = pool

    @classmethod
    async def get_pool(cls, name: str = "default") -> asyncpg.Pool:
        if name not in _db_pools:
            raise StoreError(f"Database pool '{name}' not found")
        return _db_pools[name]

    @classmethod
    def get_current_connection(cls) -> asyncpg.Connection | None:
        return _current_connection.get()

    @classmethod
    def get_query_tracker(cls) -> QueryTracker | None:
        return _query_tracker.get()

    @classmethod
    def log_query(cls, query: str, params: list[Any]):
        """Log a statement at DEBUG and record it in the active tracker, if any"""
        logger.debug("%s %r", query, params)
        tracker = _query_tracker.get()
        if tracker:
            # Drop this frame and the DatabaseOperations frame
            stack = traceback.extract_stack()[:-2]
            tracker.log_query(query, params, "".join(traceback.format_list(stack)))

    @classmethod
    @asynccontextmanager
    async def transaction(cls, db_name: str = "default", track_queries: bool = False):
        """Run the block inside a transaction.

        Inside an existing transaction a nested one (savepoint) is opened on
        the same connection. Otherwise a connection is acquired from the pool
        named `db_name` and released when the block exits.
        """
        current_conn = _current_connection.get()
        current_tracker = _query_tracker.get()

        if current_conn:
            async with current_conn.transaction():
                yield current_conn
        else:
            pool = await cls.get_pool(db_name)
            async with pool.acquire() as conn, conn.transaction():
                conn_token = _current_connection.set(conn)

                tracker_token = None
                if track_queries and not current_tracker:
                    tracker = QueryTracker()
                    tracker.enable()
                    tracker_token = _query_tracker.set(tracker)

                try:
                    yield conn
                finally:
                    _current_connection.reset(conn_token)
                    if tracker_token:
                        _query_tracker.reset(tracker_token)

    @classmethod
    @asynccontextmanager
    async def track_queries(cls):
        """Record every statement executed inside the block.

        async with DatabaseManager.track_queries() as tracker:
            await posts.list_all_posts()
            print(tracker.count())
        """
        current_tracker = _query_tracker.get()

        if current_tracker:
            was_enabled = current_tracker.is_enabled()
            current_tracker.enable()
            try:
                yield current_tracker
            finally:
                if not was_enabled:
                    current_tracker.disable()
        else:
            tracker = QueryTracker()
            tracker.enable()
            token = _query_tracker.set(tracker)
            try:
                yield tracker
            finally:
                _query_tracker.reset(token)


def transactional(db_name: str = "default", query_logs: bool = False):
    """Decorator running a coroutine inside `DatabaseManager.transaction`.

    Example:
        @transactional("default")
        async def seed(posts):
            for post in posts:
                await post_repo.create(post)
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            async with DatabaseManager.transaction(db_name, track_queries=query_logs):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
