from typing import Any

import asyncpg

from blog_service.db_context import DatabaseManager
from blog_service.errors import StoreError


class DatabaseOperations:
    """Runs statements on the connection bound to the current transaction"""

    @staticmethod
    def get_connection() -> asyncpg.Connection:
        conn = DatabaseManager.get_current_connection()
        if not conn:
            raise StoreError(
                "No active transaction found. Repository methods must be called within a transaction context."
            )
        return conn

    async def fetch_all(self, query: str, params: list[Any]) -> list[asyncpg.Record]:
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        return await conn.fetch(query, *params)

    async def fetch_one(self, query: str, params: list[Any]) -> asyncpg.Record | None:
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        return await conn.fetchrow(query, *params)

    async def fetch_value(self, query: str, params: list[Any]) -> Any:
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        return await conn.fetchval(query, *params)

    async def execute_query(self, query: str, params: list[Any]) -> str:
        """Execute a statement and return its status tag, e.g. 'DELETE 1'"""
        conn = self.get_connection()
        DatabaseManager.log_query(query, params)
        return await conn.execute(query, *params)

    @staticmethod
    def affected_rows(status: str) -> int:
        """Row count from a status tag such as 'UPDATE 3'"""
        try:
            return int(status.split()[-1])
        except (ValueError, IndexError):
            return 0
