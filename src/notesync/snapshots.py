"""Provides the :class:`SnapshotStore` class, which persists the full application state and its backups."""

from datetime import datetime, timedelta, timezone
import json
import logging
import random
from typing import Callable, List, Optional

from notesync.errors import FormatError, StorageError
from notesync.models import Snapshot
from notesync.storage.base import Storage

logger = logging.getLogger(__name__)

DEFAULT_SNAPSHOT_KEY = 'notepad-web-data'
DEFAULT_MAX_BACKUPS = 5
DEFAULT_BACKUP_PROBABILITY = 0.1

# Caught at the store boundary: medium failures, plus what json.dumps raises for unserializable settings.
_SAVE_ERRORS = (StorageError, TypeError, ValueError)


def backup_stamp(when: datetime) -> str:
    """Returns a fixed-width, filename-safe form of the time, so that stamps sort chronologically as strings.

    For example, ``2021-02-03T04:05:06.000007Z`` becomes ``2021-02-03T04-05-06-000007Z``.
    """
    when = when.astimezone(timezone.utc)
    iso = when.strftime('%Y-%m-%dT%H:%M:%S.%fZ')
    return iso.replace(':', '-').replace('.', '-')


class SnapshotStore:
    """Saves and loads the application :class:`notesync.models.Snapshot` in a :class:`notesync.storage.base.Storage`.

    The live snapshot is kept under a single key. Backups are kept under that key plus ``-backup-`` and a timestamp,
    and only the newest :attr:`max_backups` are retained. Backups are never modified after they are written, and
    :meth:`clear` leaves them alone so that recent history can still be recovered after the live data is wiped.

    Failures to write to the storage medium are logged and reported as a False return value rather than raised.

    .. attribute:: storage
       :type: notesync.storage.base.Storage

    .. attribute:: key
       :type: str
    """
    def __init__(self, storage: Storage, key: str = DEFAULT_SNAPSHOT_KEY, *, max_backups: int = DEFAULT_MAX_BACKUPS,
                 backup_probability: float = DEFAULT_BACKUP_PROBABILITY, rand: Callable[[], float] = random.random):
        if max_backups < 1:
            raise ValueError('`max_backups` must be at least 1.')
        self.storage = storage
        self.key = key
        self.max_backups = max_backups
        self.backup_probability = backup_probability
        self.rand = rand

    @property
    def backup_prefix(self) -> str:
        return f'{self.key}-backup-'

    def save(self, snapshot: Snapshot) -> bool:
        """Overwrites the live snapshot. Returns False, after logging the cause, if it could not be written."""
        try:
            self.storage.set(self.key, json.dumps(snapshot.as_json()))
        except _SAVE_ERRORS:
            logger.exception('Failed to save snapshot to %s', self.key)
            return False
        logger.debug('Saved snapshot to %s', self.key)
        return True

    def _read(self, key: str) -> Optional[Snapshot]:
        text = self.storage.get(key)
        if text is None:
            return None
        try:
            return Snapshot.from_json(json.loads(text))
        except (KeyError, TypeError, ValueError):
            logger.exception('Stored snapshot %s is unreadable', key)
            return None

    def load(self) -> Optional[Snapshot]:
        """Returns the live snapshot, or None if nothing has been saved (or what was saved cannot be read)."""
        try:
            return self._read(self.key)
        except StorageError:
            logger.exception('Failed to load snapshot %s', self.key)
            return None

    def has_data(self) -> bool:
        return self.storage.contains(self.key)

    def clear(self) -> bool:
        """Deletes the live snapshot. Backups are kept. Returns False, after logging the cause, on failure."""
        try:
            self.storage.remove(self.key)
        except StorageError:
            logger.exception('Failed to clear snapshot %s', self.key)
            return False
        logger.info('Cleared snapshot %s', self.key)
        return True

    def export_snapshot(self, snapshot: Snapshot) -> str:
        """Returns a pretty-printed document containing the whole snapshot, which :meth:`import_snapshot` accepts."""
        return json.dumps(snapshot.as_json(), indent=2, ensure_ascii=False)

    def import_snapshot(self, document: str) -> Snapshot:
        """Parses a document produced by :meth:`export_snapshot`.

        Raises :exc:`notesync.errors.FormatError` if the document is not JSON, does not have a list of ``projects``
        at the top level, or contains a project or note that cannot be read. This does not change anything in
        storage; call :meth:`save` with the result to make it the live snapshot.
        """
        try:
            data = json.loads(document)
        except ValueError as e:
            raise FormatError('Import document is not valid JSON', e)
        if not isinstance(data, dict) or not isinstance(data.get('projects'), list):
            raise FormatError('Import document must contain a list of projects')
        try:
            return Snapshot.from_json(data)
        except (KeyError, TypeError, ValueError) as e:
            raise FormatError(f'Import document contains an invalid project or note: {e!r}', e)

    def list_backups(self) -> List[str]:
        """Returns the keys of all backups, newest first."""
        return sorted((k for k in self.storage.keys() if k.startswith(self.backup_prefix)), reverse=True)

    def create_backup(self, snapshot: Snapshot) -> bool:
        """Writes the snapshot as a new backup, then deletes all but the newest :attr:`max_backups` backups.

        Returns False, after logging the cause, if the backup could not be written or old backups could not be pruned.
        """
        try:
            text = json.dumps(snapshot.as_json())
            when = datetime.now(timezone.utc)
            backup_key = f'{self.backup_prefix}{backup_stamp(when)}'
            while self.storage.contains(backup_key):
                when += timedelta(microseconds=1)
                backup_key = f'{self.backup_prefix}{backup_stamp(when)}'
            self.storage.set(backup_key, text)
            logger.info('Created backup %s', backup_key)
            self._prune_backups()
        except _SAVE_ERRORS:
            logger.exception('Failed to create backup of %s', self.key)
            return False
        return True

    def _prune_backups(self) -> None:
        for old_key in self.list_backups()[self.max_backups:]:
            self.storage.remove(old_key)
            logger.info('Removed old backup %s', old_key)

    def restore_backup(self, backup_key: str) -> Optional[Snapshot]:
        """Makes the given backup the live snapshot and returns it.

        Returns None if the backup does not exist, cannot be read, or could not be saved as the live snapshot.
        The backup itself is left in place.
        """
        if not backup_key.startswith(self.backup_prefix):
            raise ValueError(f'Not a backup key for {self.key}: {backup_key}')
        try:
            snapshot = self._read(backup_key)
        except StorageError:
            logger.exception('Failed to read backup %s', backup_key)
            return None
        if snapshot is None or not self.save(snapshot):
            return None
        logger.info('Restored backup %s', backup_key)
        return snapshot

    def record(self, snapshot: Snapshot, force_backup: bool = False) -> bool:
        """Saves the snapshot after a change, and sometimes also backs it up.

        A backup is made with probability :attr:`backup_probability` (or always, if ``force_backup`` is True), which
        bounds how much gets written while still keeping reasonably recent backups. The backup is only attempted once
        the save has succeeded. Returns the result of the save.
        """
        if not self.save(snapshot):
            return False
        if force_backup or self.rand() < self.backup_probability:
            self.create_backup(snapshot)
        return True
