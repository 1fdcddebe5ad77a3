"""Provides the :class:`SyncEngine` class, which pushes projects to a remote repository and pulls them back."""

import json
import logging
from typing import Iterable, List, Optional

from notesync.errors import Error, FormatError, PathError
from notesync.markdown import decode_note, encode_note
from notesync.models import Note, NoteFailure, Project, PushResult, SyncReport
from notesync.paths import NOTE_SUFFIX, PROJECTS_DIR, note_paths, notes_dir, project_meta_path, sanitize
from notesync.remotes.base import RemoteRepo

logger = logging.getLogger(__name__)


def _check_name(name: str) -> None:
    if not sanitize(name):
        raise PathError(f'Project name {name!r} has no characters usable in a path')


class SyncEngine:
    """Copies projects between local state and a :class:`notesync.remotes.base.RemoteRepo`.

    All remote calls are made one at a time, in order. Before each note is written, its current version token is
    fetched, so a note that changed remotely since that fetch fails with :exc:`notesync.errors.ConflictError` rather
    than being overwritten. There is no saved progress: if a push or pull stops partway through, running it again
    is safe.

    .. attribute:: repo
       :type: notesync.remotes.base.RemoteRepo
    """
    def __init__(self, repo: RemoteRepo):
        self.repo = repo

    def _current_version(self, path: str) -> Optional[str]:
        existing = self.repo.get(path)
        return existing.version if existing else None

    def push_project(self, project: Project) -> PushResult:
        """Writes the project's metadata and each of its notes to the remote.

        The metadata is written over whatever is there (the latest push wins), and any error doing so is raised.
        Each note is then written independently: if one fails, the error is recorded in the result and the remaining
        notes are still pushed.
        """
        _check_name(project.name)
        meta_path = project_meta_path(project.name)
        meta = json.dumps(project.metadata_json(), indent=2, ensure_ascii=False)
        self.repo.put(meta_path, meta, f'Update project: {project.name}', self._current_version(meta_path))
        logger.info('Pushed metadata for project %s', project.name)

        result = PushResult()
        for note_id, path in note_paths(project).items():
            note = project.note(note_id)
            try:
                self.push_note(note, path)
            except Error as e:
                logger.warning('Failed to push note %s (%s): %s', note.id, path, e)
                result.failed.append(NoteFailure(note, e))
            else:
                result.succeeded.append(note)
        return result

    def push_note(self, note: Note, path: str) -> str:
        """Writes one note to the given path, creating or updating it as needed. Returns the new version token."""
        version = self._current_version(path)
        return self.repo.put(path, encode_note(note), f'Update note: {note.title}', version)

    def pull_project(self, name: str) -> Optional[Project]:
        """Reads a project and its notes from the remote.

        Returns None if the project has no ``project.json``; a notes directory without metadata is treated as not
        yet published. Notes whose content cannot be read as text are left out of the result. Other errors are
        raised.
        """
        _check_name(name)
        meta_path = project_meta_path(name)
        meta = self.repo.get(meta_path)
        if meta is None:
            logger.info('Skipping project %s: no %s', name, meta_path)
            return None
        try:
            project = Project.from_json(json.loads(meta.content))
        except (KeyError, TypeError, ValueError) as e:
            raise FormatError(f'Invalid project metadata in {meta_path}', e)

        for entry in self.repo.list(notes_dir(name)):
            if not (entry.type == 'file' and entry.name.endswith(NOTE_SUFFIX)):
                continue
            try:
                obj = self.repo.get(entry.path)
            except FormatError as e:
                logger.warning('Skipping unreadable note %s: %s', entry.path, e)
                continue
            if obj is None:
                logger.warning('Skipping note %s: it was deleted during the pull', entry.path)
                continue
            project.notes.append(decode_note(obj.content, entry.name[:-len(NOTE_SUFFIX)], project.id))
        logger.info('Pulled project %s with %d notes', project.name, len(project.notes))
        return project

    def pull_all(self) -> List[Project]:
        """Reads every published project from the remote. If there are no projects at all, returns an empty list.

        Directories whose names are not project slugs, and projects whose ``project.json`` cannot be read, are
        skipped with a warning. Other errors are raised.
        """
        projects = []
        for entry in self.repo.list(PROJECTS_DIR):
            if not entry.type == 'dir':
                continue
            if not sanitize(entry.name) == entry.name:
                logger.warning('Skipping %s: not a project directory', entry.path)
                continue
            try:
                project = self.pull_project(entry.name)
            except FormatError as e:
                logger.warning('Skipping project %s: %s', entry.name, e)
                continue
            if project:
                projects.append(project)
        return projects

    def delete_note(self, project: Project, note: Note) -> bool:
        """Deletes the note's file from the remote. Returns False if there was no such file."""
        path = note_paths(project).get(note.id)
        if path is None:
            raise ValueError(f'Note {note.id} does not belong to project {project.id}')
        version = self._current_version(path)
        if version is None:
            return False
        self.repo.delete(path, f'Delete note: {note.title}', version)
        return True

    def delete_project(self, project: Project) -> None:
        """Deletes all of the project's files from the remote, including notes that no longer exist locally."""
        for entry in self.repo.list(notes_dir(project.name)):
            if entry.type == 'file':
                version = entry.version or self._current_version(entry.path)
                if version:
                    self.repo.delete(entry.path, f'Delete note: {entry.name}', version)
        meta_path = project_meta_path(project.name)
        version = self._current_version(meta_path)
        if version:
            self.repo.delete(meta_path, f'Delete project: {project.name}', version)

    def sync(self, projects: Iterable[Project]) -> SyncReport:
        """Pushes all the given projects, then pulls everything back.

        Failures pushing a project or one of its notes are recorded in the report's ``errors``; the pull still
        happens. Errors during the pull are raised.
        """
        report = SyncReport()
        for project in projects:
            if not sanitize(project.name):
                report.errors.append(f'Project {project.id} has no name usable as a path')
                continue
            try:
                result = self.push_project(project)
            except Error as e:
                report.errors.append(f'Failed to push project {project.name}: {e}')
                continue
            for failure in result.failed:
                report.errors.append(f'Failed to push note {failure.note.title or failure.note.id} '
                                     f'in project {project.name}: {failure.error}')
            if result.ok:
                report.uploaded += 1
        report.projects = self.pull_all()
        report.downloaded = len(report.projects)
        return report
