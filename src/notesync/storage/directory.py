"""Provides the :class:`DirectoryStorage` class."""

import os
import os.path
import re
from typing import Iterator, Optional

from notesync.errors import StorageError
from notesync.storage.base import Storage

KEY_RE = re.compile(r'\A[A-Za-z0-9_-][A-Za-z0-9_.-]*\Z')


class DirectoryStorage(Storage):
    """Stores each key as a file in a single directory. The directory is created on first write if necessary.

    Writes go to a hidden temporary file first, which is then renamed over the real one, so a crash mid-write leaves
    the old value in place. Keys must consist of letters, digits, ``_``, ``-`` and ``.``, and may not start with ``.``.

    .. attribute:: path
       :type: str
    """
    def __init__(self, path: str):
        if not path:
            raise ValueError('`path` must be set for DirectoryStorage.')
        self.path = path

    def _key_path(self, key: str) -> str:
        if not KEY_RE.match(key):
            raise StorageError(f'Invalid storage key: {key!r}', key)
        return os.path.join(self.path, key)

    def get(self, key: str) -> Optional[str]:
        path = self._key_path(key)
        try:
            with open(path, 'r', encoding='utf-8') as file:
                return file.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f'Cannot read {path}', key, e)

    def set(self, key: str, value: str) -> None:
        path = self._key_path(key)
        tmp_path = os.path.join(self.path, f'.{key}.tmp')
        try:
            os.makedirs(self.path, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as file:
                file.write(value)
                file.flush()
                os.fsync(file.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f'Cannot write {path}', key, e)

    def remove(self, key: str) -> None:
        path = self._key_path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f'Cannot delete {path}', key, e)

    def keys(self) -> Iterator[str]:
        if not os.path.isdir(self.path):
            return
        try:
            names = os.listdir(self.path)
        except OSError as e:
            raise StorageError(f'Cannot list {self.path}', cause=e)
        for name in names:
            if KEY_RE.match(name) and os.path.isfile(os.path.join(self.path, name)):
                yield name
