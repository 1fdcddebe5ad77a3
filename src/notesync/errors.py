"""Exceptions raised by notesync.

Reads of remote objects that do not exist are not errors; they return None. Everything else that goes wrong while
talking to a remote raises one of the :class:`Error` subclasses below, unmodified, to whoever started the operation.
"""


class Error(Exception):
    """Base class for notesync errors."""
    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class StorageError(Error):
    """Raised by a :class:`notesync.storage.base.Storage` when the underlying medium fails."""
    def __init__(self, message: str, key: str = None, cause: BaseException = None):
        super().__init__(message, cause)
        self.key = key


class FormatError(Error):
    """Raised when a document (an import, a remote object, a template) does not have the expected shape."""


class RemoteError(Error):
    """Base class for failures reported by a :class:`notesync.remotes.base.RemoteRepo`."""
    def __init__(self, message: str, path: str = None, cause: BaseException = None):
        super().__init__(message, cause)
        self.path = path


class AuthError(RemoteError):
    """The credential for the remote is missing or was rejected."""


class NotFoundError(RemoteError):
    """The object does not exist. Only raised where absence is not a normal outcome, such as deletes."""


class ConflictError(RemoteError):
    """The version token supplied for a write or delete is not the object's current one."""


class NetworkError(RemoteError):
    """Any other failure to complete a remote call, including unexpected response statuses."""


class PathError(Error):
    """Raised when a name has no characters that can be used in a remote path."""
