"""Provides the :class:`SqliteStorage` class."""

import sqlite3
from typing import Iterator, Optional

from notesync.errors import StorageError
from notesync.storage.base import Storage


_SQL_CREATE_SCHEMA = """
CREATE TABLE IF NOT EXISTS entries (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_SQL_UPSERT = 'INSERT OR REPLACE INTO entries (key, value) VALUES (?, ?)'


class SqliteStorage(Storage):
    """Keeps all keys in one table of a SQLite database file.

    Each write is committed immediately. Remember to call :meth:`close` when done with the instance, or use the
    instance as a context manager.

    .. attribute:: path
       :type: str

       Path of the database file, or ``:memory:``.
    """
    def __init__(self, path: str):
        if not path:
            raise ValueError('`path` must be set for SqliteStorage.')
        self.path = path
        self.connection = None
        self._connect()

    def _connect(self):
        try:
            self.connection = sqlite3.connect(self.path)
            self.connection.executescript(_SQL_CREATE_SCHEMA)
        except sqlite3.Error as e:
            raise StorageError(f'Cannot open database {self.path}', cause=e)

    def get(self, key: str) -> Optional[str]:
        try:
            cursor = self.connection.execute('SELECT value FROM entries WHERE key = ?', (key,))
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f'Cannot read key {key}', key, e)
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            with self.connection:
                self.connection.execute(_SQL_UPSERT, (key, value))
        except sqlite3.Error as e:
            raise StorageError(f'Cannot write key {key}', key, e)

    def remove(self, key: str) -> None:
        try:
            with self.connection:
                self.connection.execute('DELETE FROM entries WHERE key = ?', (key,))
        except sqlite3.Error as e:
            raise StorageError(f'Cannot delete key {key}', key, e)

    def keys(self) -> Iterator[str]:
        try:
            rows = self.connection.execute('SELECT key FROM entries').fetchall()
        except sqlite3.Error as e:
            raise StorageError('Cannot list keys', cause=e)
        for (key,) in rows:
            yield key

    def close(self):
        if self.connection:
            self.connection.close()
            self.connection = None
