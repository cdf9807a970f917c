"""
pwservice.repository
Repository over the sqlite log tables. Passwords only ever reach the
database as argon2id hashes.
"""

import json
import logging
import sqlite3
import threading
from typing import Any, Dict, Iterable, List, Optional

from argon2 import PasswordHasher

from .evaluator import ValidationRequirements, strength_score
from .generator import GenerationOptions
from .hashing import hash_password, make_hasher
from .storage import get_connection, init_db

logger = logging.getLogger(__name__)


class PasswordRepository:
    def __init__(self, conn: sqlite3.Connection, hasher: Optional[PasswordHasher] = None):
        self.conn = conn
        self.hasher = hasher or make_hasher()
        # one connection shared by request threads; serialize statements on it
        self._lock = threading.Lock()

    @classmethod
    def open(cls, db_path: Optional[str] = None, hasher: Optional[PasswordHasher] = None) -> "PasswordRepository":
        conn = get_connection(db_path)
        init_db(conn)
        return cls(conn, hasher)

    def close(self) -> None:
        with self._lock:
            self.conn.close()

    # --- writes ---

    def log_request(self, options: GenerationOptions, count: int, user_id: Optional[int] = None) -> int:
        """Record a generation request and return its id."""
        with self._lock:
            cur = self.conn.execute(
                """
                INSERT INTO password_requests (
                    user_id, length, include_uppercase, include_lowercase,
                    include_numbers, include_symbols, exclude_ambiguous, count
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    options.length,
                    int(options.include_upper),
                    int(options.include_lower),
                    int(options.include_digits),
                    int(options.include_symbols),
                    int(options.avoid_ambiguous),
                    count,
                ),
            )
            self.conn.commit()
            request_id = cur.lastrowid
        logger.debug("Logged generation request %s (count=%d)", request_id, count)
        return request_id

    def save_passwords(self, request_id: int, passwords: Iterable[str]) -> None:
        """Store a hash and strength score per generated password. Never plaintext."""
        # hashing is the slow part; do it outside the lock
        rows = [
            (request_id, hash_password(self.hasher, pw), strength_score(pw))
            for pw in passwords
        ]
        with self._lock:
            self.conn.executemany(
                "INSERT INTO generated_passwords (request_id, password_hash, strength_score) VALUES (?, ?, ?)",
                rows,
            )
            self.conn.commit()

    def log_validation(self, password: str, requirements: ValidationRequirements, result: bool) -> int:
        encoded = hash_password(self.hasher, password)
        req_json = json.dumps(requirements.to_dict(), ensure_ascii=False)
        with self._lock:
            cur = self.conn.execute(
                "INSERT INTO password_validations (password_hash, requirements_json, result) VALUES (?, ?, ?)",
                (encoded, req_json, int(result)),
            )
            self.conn.commit()
            return cur.lastrowid

    # --- reads ---

    def get_request(self, request_id: int) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self.conn.execute(
                "SELECT * FROM password_requests WHERE id = ?", (request_id,)
            ).fetchone()
        return dict(row) if row else None

    def list_generated(self, request_id: int) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM generated_passwords WHERE request_id = ? ORDER BY id", (request_id,)
            ).fetchall()
        return [dict(r) for r in rows]

    def recent_requests(self, limit: int = 20) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM password_requests ORDER BY id DESC LIMIT ?", (limit,)
            ).fetchall()
        return [dict(r) for r in rows]

    def list_validations(self, limit: int = 20) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self.conn.execute(
                "SELECT * FROM password_validations ORDER BY id DESC LIMIT ?", (limit,)
            ).fetchall()
        out = []
        for r in rows:
            d = dict(r)
            d["requirements"] = json.loads(d.pop("requirements_json"))
            d["result"] = bool(d["result"])
            out.append(d)
        return out
