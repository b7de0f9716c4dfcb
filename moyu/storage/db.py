# storage/db.py
import sqlite3
import os
from pathlib import Path


_DEFAULT_DB_PATH = Path.home() / ".moyu" / "moyu.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS progress (
    novel_path    TEXT    PRIMARY KEY,
    chapter_index INTEGER NOT NULL,
    page_index    INTEGER NOT NULL,
    line_number   INTEGER NOT NULL DEFAULT 0,
    updated_at    INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS bookmarks (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    novel_path    TEXT    NOT NULL,
    chapter_index INTEGER NOT NULL,
    page_index    INTEGER NOT NULL,
    title         TEXT    NOT NULL,
    timestamp     INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_bookmarks_path ON bookmarks (novel_path);
"""


def get_connection(db_path: str | None = None) -> sqlite3.Connection:
    """
    Abre y configura la conexión a SQLite.
    Siempre devuelve rows como dicts (row_factory).
    """
    path = db_path or os.environ.get("MOYU_DB_PATH") or str(_DEFAULT_DB_PATH)

    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Crea las tablas si no existen. Idempotente."""
    with conn:
        conn.executescript(_SCHEMA)
