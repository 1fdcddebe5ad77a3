"""Defines the API for remote object repositories.

The most important class is :class:`RemoteRepo`.
"""

from typing import List, Optional

from notesync.models import RemoteEntry, RemoteObject


class RemoteRepo:
    """Base class for remote repositories: a tree of files addressed by ``/``-separated paths, where every stored
    revision of a file is identified by an opaque version token.

    Overwriting or deleting a file requires its current token, so a write based on stale data fails with
    :exc:`notesync.errors.ConflictError` instead of silently discarding someone else's change. Every method performs
    its work in a single attempt; failures are never retried.

    Methods may raise :exc:`notesync.errors.AuthError` if the credential is missing or rejected, and
    :exc:`notesync.errors.NetworkError` for any other failure to complete the call.
    """
    def get(self, path: str) -> Optional[RemoteObject]:
        """Returns the file's content and current version token, or None if no file exists at the path.

        Raises :exc:`notesync.errors.FormatError` if the path is a directory or the content is not text.
        """
        raise NotImplementedError()

    def put(self, path: str, content: str, message: str, version: Optional[str] = None) -> str:
        """Writes the file and returns its new version token.

        If ``version`` is None, the file must not exist yet. Otherwise it must be the file's current token.
        Raises :exc:`notesync.errors.ConflictError` if either condition does not hold. ``message`` describes the
        change, for repositories that keep a history.
        """
        raise NotImplementedError()

    def delete(self, path: str, message: str, version: str) -> None:
        """Deletes the file.

        Raises :exc:`notesync.errors.NotFoundError` if it does not exist, or :exc:`notesync.errors.ConflictError`
        if ``version`` is not its current token.
        """
        raise NotImplementedError()

    def list(self, path: str) -> List[RemoteEntry]:
        """Returns the entries directly inside the directory, sorted by name. Returns an empty list if nothing
        exists at the path."""
        raise NotImplementedError()

    def close(self) -> None:
        """Release any resources associated with the repo. Should be called when you're done with an instance."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
