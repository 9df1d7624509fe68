"""
Subscriber Store
================

SQLite persistence for subscription records. Every call opens its own
connection and runs a single statement, so each write is atomic for the
rows it targets. Uniqueness of (email, list) and of token is enforced by
the schema, never by a read-then-write check.
"""

import logging
import sqlite3
from dataclasses import dataclass
from typing import List, Optional

from buskcats.core.database import Database
from buskcats.core.errors import StoreError, UniqueViolation

logger = logging.getLogger(__name__)

_UNIQUE_CODES = (sqlite3.SQLITE_CONSTRAINT_UNIQUE, sqlite3.SQLITE_CONSTRAINT_PRIMARYKEY)

SCHEMA = '''
    CREATE TABLE IF NOT EXISTS subscribers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT NOT NULL,
        list TEXT NOT NULL,
        token TEXT UNIQUE NOT NULL,
        confirmed INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        UNIQUE(email, list)
    )
'''

INDEXES = (
    'CREATE INDEX IF NOT EXISTS idx_subscribers_list ON subscribers(list, confirmed)',
    'CREATE INDEX IF NOT EXISTS idx_subscribers_email ON subscribers(email)',
)


@dataclass(frozen=True)
class Subscriber:
    id: int
    email: str
    list: str
    token: str
    confirmed: bool
    created_at: str

    @classmethod
    def from_row(cls, row) -> 'Subscriber':
        return cls(
            id=row['id'],
            email=row['email'],
            list=row['list'],
            token=row['token'],
            confirmed=bool(row['confirmed']),
            created_at=row['created_at'],
        )

    def to_public_dict(self):
        """Admin listing shape; never includes the token"""
        return {
            'email': self.email,
            'list': self.list,
            'confirmed': self.confirmed,
            'created_at': self.created_at,
        }


class SubscriberStore:
    """Durable table of subscription records"""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _connect(self):
        return Database.connect(self.db_path)

    def init_schema(self):
        """Create the subscribers table and indexes (idempotent)"""
        Database.ensure_dir(self.db_path)
        try:
            with self._connect() as conn:
                conn.execute(SCHEMA)
                for statement in INDEXES:
                    conn.execute(statement)
            logger.info(f"Subscribers table created/verified in {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Error initializing subscribers database: {e}")
            raise StoreError(str(e)) from e

    def _write(self, sql, params) -> int:
        try:
            with self._connect() as conn:
                return conn.execute(sql, params).rowcount
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e

    def _read(self, sql, params=()) -> List[Subscriber]:
        try:
            with self._connect() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        return [Subscriber.from_row(row) for row in rows]

    def insert(self, email: str, list_name: str, token: str, confirmed: bool = False) -> Subscriber:
        """Insert a record. Raises UniqueViolation if (email, list) or token exists."""
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    'INSERT INTO subscribers (email, list, token, confirmed) VALUES (?, ?, ?, ?)',
                    (email, list_name, token, int(confirmed))
                )
                row = conn.execute(
                    'SELECT * FROM subscribers WHERE id = ?', (cursor.lastrowid,)
                ).fetchone()
        except sqlite3.IntegrityError as e:
            if getattr(e, 'sqlite_errorcode', None) in _UNIQUE_CODES:
                raise UniqueViolation(str(e)) from e
            raise StoreError(str(e)) from e
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        return Subscriber.from_row(row)

    def find_by_token(self, token: str) -> Optional[Subscriber]:
        found = self._read('SELECT * FROM subscribers WHERE token = ?', (token,))
        return found[0] if found else None

    def set_confirmed_by_token(self, token: str) -> int:
        """Rows matched, so re-confirming an already confirmed record still counts"""
        return self._write('UPDATE subscribers SET confirmed = 1 WHERE token = ?', (token,))

    def delete_by_token(self, token: str) -> int:
        return self._write('DELETE FROM subscribers WHERE token = ?', (token,))

    def delete_by_email(self, email: str, list_name: Optional[str] = None) -> int:
        if list_name:
            return self._write(
                'DELETE FROM subscribers WHERE email = ? AND list = ?', (email, list_name)
            )
        return self._write('DELETE FROM subscribers WHERE email = ?', (email,))

    def list_by_optional_list(self, list_name: Optional[str] = None) -> List[Subscriber]:
        """All records, optionally for one list, newest first"""
        if list_name:
            return self._read(
                'SELECT * FROM subscribers WHERE list = ? ORDER BY created_at DESC, id DESC',
                (list_name,)
            )
        return self._read('SELECT * FROM subscribers ORDER BY created_at DESC, id DESC')

    def list_confirmed(self, list_name: str) -> List[Subscriber]:
        """Broadcast recipients: confirmed records on exactly this list"""
        return self._read(
            'SELECT * FROM subscribers WHERE confirmed = 1 AND list = ? ORDER BY id',
            (list_name,)
        )
