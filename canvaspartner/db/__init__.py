"""PostgreSQL connectivity shared by the asyncpg-backed stores."""

from canvaspartner.db.errors import ConnectionError, StoreError
from canvaspartner.db.pool import PostgresPool

__all__ = ["ConnectionError", "PostgresPool", "StoreError"]
