"""Configuration for notesync.

The configuration is a Python file, ``~/.notesync.conf.py``, which must assign an instance of :class:`NotesyncConf`
to the variable ``conf``. For example:

.. code-block:: python

   import os
   from notesync.conf import *
   conf = NotesyncConf(
       storage_conf=DirectoryStorageConf(path='~/.notesync'),
       remote_conf=GitHubRemoteConf(
           owner='jacob',
           repository='notes',
           token=os.environ.get('NOTESYNC_GITHUB_TOKEN', ''),
       ),
   )
"""

from __future__ import annotations
from dataclasses import dataclass, replace
import os.path
from typing import Optional

from notesync.snapshots import DEFAULT_BACKUP_PROBABILITY, DEFAULT_MAX_BACKUPS, DEFAULT_SNAPSHOT_KEY
from notesync.templates import DEFAULT_TEMPLATE

USER_CONF_FILENAME = '.notesync.conf.py'


@dataclass
class StorageConf:
    """Base class for local storage config. Use a subclass such as :class:`DirectoryStorageConf`."""

    def instantiate(self):
        raise NotImplementedError('Please use a subclass like DirectoryStorageConf instead!')

    def standardize(self):
        return self


@dataclass
class MemoryStorageConf(StorageConf):
    """Keeps local state in memory only, via :class:`notesync.storage.memory.MemoryStorage`. Nothing is persisted."""

    def instantiate(self):
        from notesync.storage.memory import MemoryStorage
        return MemoryStorage()


@dataclass
class DirectoryStorageConf(StorageConf):
    """Keeps local state as files in a directory, via :class:`notesync.storage.directory.DirectoryStorage`."""

    path: str = None
    """Required. The directory to keep the snapshot and backups in. It will be created if it does not exist."""

    def instantiate(self):
        from notesync.storage.directory import DirectoryStorage
        return DirectoryStorage(self.path)

    def standardize(self):
        return replace(self, path=os.path.realpath(os.path.expanduser(self.path)) if self.path else self.path)


@dataclass
class SqliteStorageConf(StorageConf):
    """Keeps local state in a SQLite database file, via :class:`notesync.storage.sqlite.SqliteStorage`."""

    path: str = None
    """Required. Path of the database file, which will be created if it does not exist."""

    def instantiate(self):
        from notesync.storage.sqlite import SqliteStorage
        return SqliteStorage(self.path)

    def standardize(self):
        if not self.path or self.path == ':memory:':
            return self
        return replace(self, path=os.path.realpath(os.path.expanduser(self.path)))


@dataclass
class RemoteConf:
    """Base class for remote repository config. Use a subclass such as :class:`GitHubRemoteConf`."""

    def instantiate(self):
        raise NotImplementedError('Please use a subclass like GitHubRemoteConf instead!')


@dataclass
class MemoryRemoteConf(RemoteConf):
    """Uses an in-memory remote, via :class:`notesync.remotes.memory.MemoryRepo`. Useful for trying things out."""

    def instantiate(self):
        from notesync.remotes.memory import MemoryRepo
        return MemoryRepo()


@dataclass
class GitHubRemoteConf(RemoteConf):
    """Syncs with a GitHub repository, via :class:`notesync.remotes.github.GitHubRepo`."""

    owner: str = ''
    """The user or organization that owns the repository."""

    repository: str = ''

    token: str = ''
    """A personal access token with permission to read and write the repository's contents.

    Rather than writing the token into your config file, consider reading it from an environment variable.
    """

    branch: str = 'main'
    """All reads and writes use this branch."""

    base_url: str = 'https://api.github.com'
    """Change this for GitHub Enterprise installations."""

    timeout: float = 30.0
    """Seconds to wait for each request."""

    def instantiate(self):
        from notesync.remotes.github import GitHubRepo
        if not (self.owner and self.repository):
            raise ValueError('`owner` and `repository` must be set in GitHubRemoteConf.')
        return GitHubRepo(self)

    def __repr__(self):
        # keeps the token out of logs and tracebacks
        return (f'GitHubRemoteConf(owner={self.owner!r}, repository={self.repository!r}, token=***, '
                f'branch={self.branch!r}, base_url={self.base_url!r}, timeout={self.timeout!r})')


@dataclass
class NotesyncConf:
    storage_conf: StorageConf
    """Configures where local state is kept."""

    remote_conf: Optional[RemoteConf] = None
    """Configures the remote repository to sync with. Commands that need a remote will fail if this is None."""

    snapshot_key: str = DEFAULT_SNAPSHOT_KEY
    """The storage key for the live snapshot. Backup keys are derived from it."""

    max_backups: int = DEFAULT_MAX_BACKUPS
    """How many backups to keep. Older ones are deleted when a new one is made."""

    backup_probability: float = DEFAULT_BACKUP_PROBABILITY
    """The chance that any given change to local state also makes a backup."""

    template: str = DEFAULT_TEMPLATE
    """Default template for the ``render`` command. See :mod:`notesync.templates`."""

    @classmethod
    def user_conf_path(cls) -> str:
        return os.path.expanduser(os.path.join('~', USER_CONF_FILENAME))

    @classmethod
    def for_user(cls) -> NotesyncConf:
        path = cls.user_conf_path()
        if not os.path.exists(path):
            raise Exception(f'You need to create the config file: {path}')
        with open(path, 'r') as file:
            conf_script = file.read()
        context = {}
        exec(conf_script, context)
        if 'conf' not in context or not isinstance(context['conf'], cls):
            raise Exception('You need to assign an instance of NotesyncConf to the variable `conf` '
                            f'in your config file: {path}')
        return context['conf']

    def standardize(self):
        return replace(
            self,
            storage_conf=self.storage_conf.standardize()
        )

    def instantiate(self):
        from notesync.api import Notesync
        return Notesync(self.standardize())
