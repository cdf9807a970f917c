import os
import sqlite3
from typing import Optional

from .config import default_db_path

_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS password_requests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    user_id INTEGER,
    length INTEGER NOT NULL,
    include_uppercase INTEGER NOT NULL,
    include_lowercase INTEGER NOT NULL,
    include_numbers INTEGER NOT NULL,
    include_symbols INTEGER NOT NULL,
    exclude_ambiguous INTEGER NOT NULL,
    count INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS generated_passwords (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    request_id INTEGER NOT NULL REFERENCES password_requests(id),
    password_hash TEXT NOT NULL,
    strength_score INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS password_validations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    password_hash TEXT NOT NULL,
    requirements_json TEXT NOT NULL,
    result INTEGER NOT NULL
);
"""


def ensure_dir_exists(path: str) -> None:
    d = os.path.dirname(path)
    if d and not os.path.exists(d):
        os.makedirs(d, exist_ok=True)


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """
    Open the log database. ":memory:" is passed through untouched.
    """
    path = db_path or default_db_path()
    if path != ":memory:":
        ensure_dir_exists(path)
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    if path != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL;")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    conn.executescript(_SCHEMA_SQL)
    conn.commit()
