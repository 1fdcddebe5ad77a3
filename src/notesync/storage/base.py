"""Defines the API for the local storage medium.

The most important class is :class:`Storage`.
"""

from typing import Iterator, Optional


class Storage:
    """Base class for storage media, which hold string values under string keys.

    This plays the role a browser's local storage plays for the web version of the app: a single flat namespace with
    no locking. Two processes writing the same key will simply overwrite one another.

    Methods should raise :exc:`notesync.errors.StorageError` when the medium fails. They should not raise for missing
    keys, except where noted.
    """
    def get(self, key: str) -> Optional[str]:
        """Returns the value stored under the key, or None if there is none."""
        raise NotImplementedError()

    def set(self, key: str, value: str) -> None:
        """Stores the value under the key, replacing any existing value.

        The replacement should be atomic: a reader sees either the old value or the new one.
        """
        raise NotImplementedError()

    def remove(self, key: str) -> None:
        """Deletes the key. Does nothing if the key does not exist."""
        raise NotImplementedError()

    def keys(self) -> Iterator[str]:
        """Yields every key currently stored, in no particular order."""
        raise NotImplementedError()

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def close(self) -> None:
        """Release any resources associated with the storage. Should be called when you're done with an instance."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
