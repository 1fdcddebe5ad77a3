"""Provides the :class:`MemoryStorage` class."""

from typing import Dict, Iterator, Optional

from notesync.storage.base import Storage


class MemoryStorage(Storage):
    """Keeps values in a dict. Nothing survives the process; this is mostly useful for tests and previews.

    .. attribute:: values
       :type: Dict[str, str]
    """
    def __init__(self, values: Dict[str, str] = None):
        self.values = dict(values or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)

    def keys(self) -> Iterator[str]:
        yield from list(self.values)
