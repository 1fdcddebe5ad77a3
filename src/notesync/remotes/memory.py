"""Provides the :class:`MemoryRepo` class."""

import hashlib
import logging
from typing import Dict, List, Optional

from notesync.errors import ConflictError, FormatError, NotFoundError
from notesync.models import RemoteEntry, RemoteObject
from notesync.remotes.base import RemoteRepo

logger = logging.getLogger(__name__)


def blob_version(content: str) -> str:
    """Returns the git blob hash of the content, which is what GitHub uses as a file's version token."""
    data = content.encode('utf-8')
    return hashlib.sha1(b'blob %d\0' % len(data) + data).hexdigest()


class MemoryRepo(RemoteRepo):
    """Keeps files in a dict, following the same versioning rules as a real remote.

    Useful for tests and for trying out a sync without touching a real repository.

    .. attribute:: files
       :type: Dict[str, RemoteObject]

    .. attribute:: calls
       :type: List[Tuple[str, str]]

       The operation name and path of every call made, in order.
    """
    def __init__(self, files: Dict[str, str] = None):
        self.files = {}
        self.calls = []
        for path, content in (files or {}).items():
            self.files[path.strip('/')] = RemoteObject(content, blob_version(content))

    def get(self, path: str) -> Optional[RemoteObject]:
        path = path.strip('/')
        self.calls.append(('get', path))
        obj = self.files.get(path)
        if obj is None:
            if any(p.startswith(f'{path}/') for p in self.files):
                raise FormatError(f'Path is a directory: {path}')
            return None
        return RemoteObject(obj.content, obj.version)

    def put(self, path: str, content: str, message: str, version: Optional[str] = None) -> str:
        path = path.strip('/')
        self.calls.append(('put', path))
        current = self.files.get(path)
        if current is None and version is not None:
            raise ConflictError(f'Cannot update {path} at version {version}: it does not exist', path)
        if current is not None and not current.version == version:
            raise ConflictError(f'Version {version} of {path} is not current', path)
        obj = RemoteObject(content, blob_version(content))
        self.files[path] = obj
        logger.debug('%s: %s', path, message)
        return obj.version

    def delete(self, path: str, message: str, version: str) -> None:
        path = path.strip('/')
        self.calls.append(('delete', path))
        current = self.files.get(path)
        if current is None:
            raise NotFoundError(f'Cannot delete {path}: it does not exist', path)
        if not current.version == version:
            raise ConflictError(f'Version {version} of {path} is not current', path)
        del self.files[path]
        logger.debug('%s: %s', path, message)

    def list(self, path: str) -> List[RemoteEntry]:
        path = path.strip('/')
        self.calls.append(('list', path))
        if path in self.files:
            name = path.rsplit('/', 1)[-1]
            return [RemoteEntry(name, path, 'file', self.files[path].version)]
        prefix = f'{path}/' if path else ''
        entries = {}
        for file_path, obj in self.files.items():
            if not file_path.startswith(prefix):
                continue
            name, sep, _ = file_path[len(prefix):].partition('/')
            if sep:
                entries[name] = RemoteEntry(name, f'{prefix}{name}', 'dir')
            else:
                entries[name] = RemoteEntry(name, file_path, 'file', obj.version)
        return [entries[name] for name in sorted(entries)]
