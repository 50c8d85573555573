"""
PharmaFind: Database Connection Module

Thread-safe psycopg2 pool over the pharmacies and drugs tables,
configured from PHARMAFIND_DB_* environment variables.

When the database is unavailable, the API falls back to serving the
JSON dataset under data/.

Usage:
    from . import db

    if db.init_pool():
        with db.get_conn() as conn:
            with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
                cur.execute("SELECT name, price, stock FROM drugs WHERE pharmacy_id = %s", (pid,))
                rows = cur.fetchall()
"""

from __future__ import annotations

import logging
import os

from psycopg2 import extras, pool  # noqa: F401 (extras re-exported for helpers)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration (env vars with local-dev defaults)
# ---------------------------------------------------------------------------

DB_CONFIG = {
    "host": os.environ.get("PHARMAFIND_DB_HOST", "localhost"),
    "port": int(os.environ.get("PHARMAFIND_DB_PORT", "5432")),
    "dbname": os.environ.get("PHARMAFIND_DB_NAME", "pharmafind"),
    "user": os.environ.get("PHARMAFIND_DB_USER", "pharmafind"),
    "password": os.environ.get("PHARMAFIND_DB_PASSWORD", "pharmafind_local_dev"),
}

_pool: pool.ThreadedConnectionPool | None = None


# ---------------------------------------------------------------------------
# Pool lifecycle
# ---------------------------------------------------------------------------


def init_pool(minconn: int = 2, maxconn: int = 10) -> bool:
    """
    Initialize the connection pool.

    Returns True if the database is reachable and the pool is ready.
    Returns False on any failure; the API then serves the JSON dataset.
    """
    global _pool
    try:
        _pool = pool.ThreadedConnectionPool(minconn, maxconn, **DB_CONFIG)
        # Both tables the search reads from must exist
        conn = _pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT count(*) FROM pharmacies")
                pharmacy_count = cur.fetchone()[0]
                cur.execute("SELECT count(*) FROM drugs")
                drug_count = cur.fetchone()[0]
        finally:
            _pool.putconn(conn)
        logger.info(
            "Database pool ready (%s@%s:%s/%s): %d pharmacies, %d drug rows",
            DB_CONFIG["user"],
            DB_CONFIG["host"],
            DB_CONFIG["port"],
            DB_CONFIG["dbname"],
            pharmacy_count,
            drug_count,
        )
        return True
    except Exception as e:
        logger.warning("Database unavailable, falling back to JSON: %s", e)
        if _pool is not None:
            try:
                _pool.closeall()
            except Exception:
                logger.debug("Error closing half-open pool", exc_info=True)
        _pool = None
        return False


def close_pool() -> None:
    """Close all pool connections. Called at app shutdown."""
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Database pool closed.")


def is_available() -> bool:
    """True once init_pool() has succeeded and until close_pool()."""
    return _pool is not None


# ---------------------------------------------------------------------------
# Connection context manager
# ---------------------------------------------------------------------------


class get_conn:
    """
    Context manager that checks out a connection from the pool.

    Commits on clean exit, rolls back on exception, always returns the
    connection to the pool.
    """

    def __enter__(self):
        if _pool is None:
            raise RuntimeError("Database pool not initialized")
        self.conn = _pool.getconn()
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.conn.rollback()
        else:
            self.conn.commit()
        _pool.putconn(self.conn)
        return False
