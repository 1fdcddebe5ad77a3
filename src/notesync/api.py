"""Provides the main entry point for using the library, :class:`Notesync`"""

from __future__ import annotations
from datetime import datetime
import logging
from typing import List, Optional

from notesync.conf import NotesyncConf
from notesync.errors import Error, NotFoundError
from notesync.models import Note, Project, PushResult, Snapshot, SyncReport, generate_id, utc_now
from notesync.snapshots import SnapshotStore
from notesync.sync import SyncEngine
from notesync.templates import DATE_FORMAT, TIME_FORMAT, render_note

logger = logging.getLogger(__name__)


class Notesync:
    """Main entry point for working programmatically with your projects and notes.

    Generally, you should get an instance using the :meth:`Notesync.for_user` method. Call :meth:`close` when you're
    done with it, or else use it as a context manager.

    The current state is held in :attr:`snapshot`. Every method that changes it also records it with :attr:`store`,
    which may make a backup as well.

    .. attribute:: conf
       :type: notesync.conf.NotesyncConf

    .. attribute:: store
       :type: notesync.snapshots.SnapshotStore

    .. attribute:: repo
       :type: Optional[notesync.remotes.base.RemoteRepo]

       None if no remote is configured.

    .. attribute:: snapshot
       :type: notesync.models.Snapshot

    Here's an example that pushes a new project with one note:

    .. code-block:: python

       from notesync.api import Notesync
       with Notesync.for_user() as ns:
           project = ns.create_project('Demo')
           ns.create_note(project.id, 'Hello', '<p>Hi</p>')
           result = ns.push(project.id)
    """

    @staticmethod
    def for_user() -> Notesync:
        """Creates an instance using the user's ``~/.notesync.conf.py`` file.

        Raises :exc:`Exception` if it does not exist or does not define configuration.
        """
        return NotesyncConf.for_user().instantiate()

    def __init__(self, conf: NotesyncConf):
        self.conf = conf
        self.storage = conf.storage_conf.instantiate()
        self.store = SnapshotStore(self.storage, conf.snapshot_key, max_backups=conf.max_backups,
                                   backup_probability=conf.backup_probability)
        self.repo = conf.remote_conf.instantiate() if conf.remote_conf else None
        self.snapshot = self.store.load() or Snapshot()

    @property
    def engine(self) -> SyncEngine:
        if not self.repo:
            raise Error('No remote repository is configured; set `remote_conf` in your config file.')
        return SyncEngine(self.repo)

    def _record(self) -> bool:
        return self.store.record(self.snapshot)

    def project(self, name_or_id: str) -> Project:
        """Finds a project by id, or failing that by name. Raises :exc:`notesync.errors.NotFoundError` if neither
        matches."""
        project = self.snapshot.project(name_or_id) or self.snapshot.project_named(name_or_id)
        if not project:
            raise NotFoundError(f'No project with id or name: {name_or_id}')
        return project

    def note(self, note_id: str) -> Note:
        note = self.snapshot.note(note_id)
        if not note:
            raise NotFoundError(f'No note with id: {note_id}')
        return note

    def create_project(self, name: str, description: str = '') -> Project:
        project = Project(id=generate_id(), name=name, description=description)
        self.snapshot.projects.append(project)
        self._record()
        return project

    def update_project(self, project_id: str, name: Optional[str] = None,
                       description: Optional[str] = None) -> Project:
        project = self.project(project_id)
        if name is not None:
            project.name = name
        if description is not None:
            project.description = description
        project.updated_at = utc_now()
        self._record()
        return project

    def delete_project(self, project_id: str) -> None:
        """Deletes the project and all of its notes from local state. The remote is not changed."""
        project = self.project(project_id)
        self.snapshot.projects.remove(project)
        if self.snapshot.current_project_id == project.id:
            self.snapshot.current_project_id = None
        self.snapshot.current_note_id = None
        self._record()

    def create_note(self, project_id: str, title: str = '', content: str = '') -> Note:
        """Adds a note to the project and makes it the current note.

        If no title is given, the current date and time is used.
        """
        project = self.project(project_id)
        now = utc_now()
        title = title or datetime.now().strftime(f'{DATE_FORMAT} {TIME_FORMAT}')
        note = Note(id=generate_id(), project_id=project.id, title=title, content=content, created_at=now,
                    updated_at=now)
        project.notes.append(note)
        self.snapshot.current_note_id = note.id
        self._record()
        return note

    def update_note(self, note_id: str, title: Optional[str] = None, content: Optional[str] = None) -> Note:
        note = self.note(note_id)
        note.edit(title=title, content=content)
        self._record()
        return note

    def delete_note(self, note_id: str) -> None:
        note = self.note(note_id)
        project = self.project(note.project_id)
        project.notes.remove(note)
        if self.snapshot.current_note_id == note_id:
            self.snapshot.current_note_id = None
        self._record()

    def push(self, project_name_or_id: str) -> PushResult:
        """Pushes one project to the remote. Notes that were pushed successfully get their ``last_saved`` updated."""
        project = self.project(project_name_or_id)
        result = self.engine.push_project(project)
        now = utc_now()
        for note in result.succeeded:
            note.last_saved = now
        self._record()
        return result

    def _merge(self, pulled: List[Project]) -> None:
        for project in pulled:
            for i, existing in enumerate(self.snapshot.projects):
                if existing.id == project.id:
                    self.snapshot.projects[i] = project
                    logger.debug('Replaced local project %s with pulled copy', project.id)
                    break
            else:
                self.snapshot.projects.append(project)
                logger.debug('Added pulled project %s', project.id)

    def pull(self, name: Optional[str] = None) -> List[Project]:
        """Pulls one project (or, if no name is given, all projects) from the remote into local state.

        Pulled projects replace local projects with the same id; others are added. Returns the pulled projects.
        A project without metadata on the remote is skipped, so the result may be empty.
        """
        if name is None:
            pulled = self.engine.pull_all()
        else:
            project = self.engine.pull_project(name)
            pulled = [project] if project else []
        if pulled:
            self._merge(pulled)
            self._record()
        return pulled

    def sync(self) -> SyncReport:
        """Pushes every local project, then pulls everything from the remote into local state."""
        report = self.engine.sync(list(self.snapshot.projects))
        if report.projects:
            self._merge(report.projects)
        self._record()
        return report

    def export(self) -> str:
        """Returns a document containing all local state, which :meth:`import_document` accepts."""
        return self.store.export_snapshot(self.snapshot)

    def import_document(self, document: str) -> Snapshot:
        """Replaces all local state with the contents of an exported document.

        Raises :exc:`notesync.errors.FormatError` if the document is invalid, in which case nothing is changed.
        The replaced state is backed up first.
        """
        snapshot = self.store.import_snapshot(document)
        self.store.create_backup(self.snapshot)
        self.snapshot = snapshot
        self._record()
        return snapshot

    def restore_backup(self, backup_key: str) -> Snapshot:
        snapshot = self.store.restore_backup(backup_key)
        if snapshot is None:
            raise NotFoundError(f'Backup could not be restored: {backup_key}')
        self.snapshot = snapshot
        return snapshot

    def clear(self) -> bool:
        """Deletes all local state. Backups are kept, so it can be recovered with :meth:`restore_backup`."""
        cleared = self.store.clear()
        if cleared:
            self.snapshot = Snapshot()
        return cleared

    def render(self, note_id: str, template: Optional[str] = None) -> str:
        """Renders the note with the given template, or the configured default. See :mod:`notesync.templates`."""
        note = self.note(note_id)
        return render_note(template or self.conf.template, note, self.snapshot.project(note.project_id))

    def close(self):
        """Closes the associated storage and remote, and releases any other resources."""
        if self.repo:
            self.repo.close()
        self.storage.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
