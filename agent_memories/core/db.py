"""
SQLite connection handling for the durable vector index.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator

from .config import ensure_db_directory, get_db_path


@contextmanager
def get_db(db_path: str = None) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path or get_db_path())
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str = None):
    """Initialize the database with required tables."""
    db_path = db_path or get_db_path()
    ensure_db_directory(db_path)

    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # seq preserves insertion order; an upsert gets a new seq
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS memories (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                vector BLOB NOT NULL,
                dimension INTEGER NOT NULL,
                content TEXT NOT NULL,
                metadata TEXT,
                created_at TEXT,
                updated_at TEXT,
                agent_id TEXT,
                category TEXT,
                importance REAL
            )
        ''')

        cursor.execute('CREATE INDEX IF NOT EXISTS idx_memories_agent_id ON memories(agent_id)')
        cursor.execute('CREATE INDEX IF NOT EXISTS idx_memories_category ON memories(category)')

        conn.commit()


def health_check(db_path: str = None):
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [table[0] for table in cursor.fetchall()]
            return 'memories' in table_names
    except sqlite3.Error:
        return False
