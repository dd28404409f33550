"""Database schema and connection management for SQLite."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from fragments.config import DATABASE_PATH


def init_database() -> None:
    """
    Initialize database and create tables if they don't exist.
    """
    db_path = Path(DATABASE_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection() as conn:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS fragments (
                owner_id TEXT NOT NULL,
                fragment_id TEXT NOT NULL,
                type TEXT NOT NULL,
                size INTEGER NOT NULL,
                created TEXT NOT NULL,
                updated TEXT NOT NULL,
                PRIMARY KEY(owner_id, fragment_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS fragment_data (
                owner_id TEXT NOT NULL,
                fragment_id TEXT NOT NULL,
                data BLOB NOT NULL,
                PRIMARY KEY(owner_id, fragment_id)
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_fragments_owner_created ON fragments(owner_id, created)
        """)

        conn.commit()


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections.
    """
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()
