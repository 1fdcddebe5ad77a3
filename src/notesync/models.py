"""Defines classes for representing projects, notes, and the results of sync operations.

The most important classes are :class:`Project`, :class:`Note`, and :class:`Snapshot`.

Dates are always timezone-aware. When serialized (see the ``as_json`` methods) field names follow the document format
the web version of the app writes, e.g. ``createdAt`` rather than ``created_at``, so exports from either can be
imported by the other.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
import shortuuid


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    """Returns a new random identifier for a project or note."""
    return shortuuid.uuid()


def parse_datetime(value: str) -> datetime:
    """Parses an ISO-8601 string, including the ``Z`` suffix used by JavaScript's ``toISOString``.

    Naive values are assumed to be UTC. Raises :exc:`ValueError` if the string cannot be parsed.
    """
    if not isinstance(value, str):
        raise ValueError(f'Expected an ISO-8601 string, not {value!r}')
    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    result = datetime.fromisoformat(value)
    if not result.tzinfo:
        result = result.replace(tzinfo=timezone.utc)
    return result


def strip_tags(content: str) -> str:
    """Returns the text of the given content with any HTML markup removed."""
    if not content:
        return ''
    return BeautifulSoup(content, 'html.parser').get_text()


def _check_object(data, kind: str) -> None:
    if not isinstance(data, dict):
        raise TypeError(f'Expected a {kind} object, not {type(data).__name__}')


def _list(data: dict, key: str) -> list:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise TypeError(f'`{key}` must be a list, not {type(value).__name__}')
    return value


def _text(data: dict, key: str, required: bool = False) -> str:
    value = data[key] if required else data.get(key)
    if value is None and not required:
        return ''
    if not isinstance(value, str):
        raise TypeError(f'`{key}` must be a string, not {type(value).__name__}')
    return value


@dataclass
class Note:
    """A single note. Notes always belong to exactly one :class:`Project`, identified by :attr:`project_id`.

    :attr:`character_count`, :attr:`line_count` and :attr:`file_size` are derived from :attr:`content` and are
    recalculated every time it is assigned; they cannot be passed to the constructor.
    """

    id: str

    project_id: str
    """The id of the owning project. This is a plain id rather than a reference to the project object."""

    title: str = ''

    content: str = ''
    """The note body. This is treated as opaque text, but is usually HTML from the editor."""

    created_at: datetime = field(default_factory=utc_now)

    updated_at: datetime = field(default_factory=utc_now)

    last_saved: Optional[datetime] = None
    """When the note was last explicitly saved, if ever."""

    character_count: int = field(init=False, default=0)
    """Length of the content once markup is stripped."""

    line_count: int = field(init=False, default=0)
    """Number of lines in the content once markup is stripped. Empty content counts as one line."""

    file_size: int = field(init=False, default=0)
    """Size in bytes of the UTF-8 encoded content, markup included."""

    def __post_init__(self):
        self._recount()

    def __setattr__(self, name, value):
        super().__setattr__(name, value)
        if name == 'content':
            self._recount()

    def _recount(self) -> None:
        content = self.__dict__.get('content') or ''
        text = strip_tags(content)
        super().__setattr__('character_count', len(text))
        super().__setattr__('line_count', text.count('\n') + 1)
        super().__setattr__('file_size', len(content.encode('utf-8')))

    def edit(self, title: Optional[str] = None, content: Optional[str] = None) -> None:
        """Applies a user edit, updating :attr:`updated_at`. Arguments left as None are not changed."""
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content
        self.updated_at = utc_now()

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'projectId': self.project_id,
            'title': self.title,
            'content': self.content,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
            'lastSaved': self.last_saved.isoformat() if self.last_saved else None,
            'characterCount': self.character_count,
            'lineCount': self.line_count,
            'fileSize': self.file_size,
        }

    @classmethod
    def from_json(cls, data: dict, project_id: str = None) -> Note:
        """Reverses :meth:`as_json`. The derived counters in the data are ignored and recalculated.

        Raises :exc:`KeyError`, :exc:`TypeError` or :exc:`ValueError` if the data is malformed.
        """
        _check_object(data, 'note')
        last_saved = data.get('lastSaved')
        return cls(
            id=str(data['id']),
            project_id=str(data.get('projectId') or project_id or ''),
            title=_text(data, 'title'),
            content=_text(data, 'content'),
            created_at=parse_datetime(data['createdAt']),
            updated_at=parse_datetime(data['updatedAt']),
            last_saved=parse_datetime(last_saved) if last_saved else None)


@dataclass
class Project:
    """A named collection of notes. The project owns its notes; deleting it deletes them."""

    id: str

    name: str

    description: str = ''

    created_at: datetime = field(default_factory=utc_now)

    updated_at: datetime = field(default_factory=utc_now)

    notes: List[Note] = field(default_factory=list)

    def note(self, note_id: str) -> Optional[Note]:
        """Returns the note with the given id, if it belongs to this project."""
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    def metadata_json(self) -> dict:
        """Returns the project's details without its notes, as stored in the remote ``project.json``."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
            'notesCount': len(self.notes),
        }

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
            'notes': [n.as_json() for n in self.notes],
        }

    @classmethod
    def from_json(cls, data: dict) -> Project:
        """Reverses :meth:`as_json`. Also accepts the metadata document, which has no ``notes``.

        Raises :exc:`KeyError`, :exc:`TypeError` or :exc:`ValueError` if the data is malformed.
        """
        _check_object(data, 'project')
        project_id = str(data['id'])
        return cls(
            id=project_id,
            name=_text(data, 'name', required=True),
            description=_text(data, 'description'),
            created_at=parse_datetime(data['createdAt']),
            updated_at=parse_datetime(data['updatedAt']),
            notes=[Note.from_json(n, project_id) for n in _list(data, 'notes')])


@dataclass
class Snapshot:
    """The complete local state of the application."""

    projects: List[Project] = field(default_factory=list)

    settings: Dict[str, Any] = field(default_factory=dict)
    """Application settings. These are carried through saves, exports and imports as-is."""

    current_project_id: Optional[str] = None

    current_note_id: Optional[str] = None

    def project(self, project_id: str) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def project_named(self, name: str) -> Optional[Project]:
        """Returns the first project with the given name, compared case-insensitively."""
        for project in self.projects:
            if project.name.lower() == name.lower():
                return project
        return None

    def note(self, note_id: str) -> Optional[Note]:
        """Finds a note by id in any project."""
        for project in self.projects:
            note = project.note(note_id)
            if note:
                return note
        return None

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'projects': [p.as_json() for p in self.projects],
            'settings': self.settings,
            'currentProjectId': self.current_project_id,
            'currentNoteId': self.current_note_id,
        }

    @classmethod
    def from_json(cls, data: dict) -> Snapshot:
        """Reverses :meth:`as_json`.

        Raises :exc:`KeyError`, :exc:`TypeError` or :exc:`ValueError` if the data is malformed.
        """
        _check_object(data, 'snapshot')
        if not isinstance(data['projects'], list):
            raise TypeError('`projects` must be a list')
        return cls(
            projects=[Project.from_json(p) for p in data['projects']],
            settings=data.get('settings') or {},
            current_project_id=data.get('currentProjectId'),
            current_note_id=data.get('currentNoteId'))


@dataclass
class RemoteObject:
    """The content of a remote file along with the version token identifying that exact revision."""

    content: str

    version: str


@dataclass
class RemoteEntry:
    """One item in a remote directory listing."""

    name: str

    path: str

    type: str
    """Either ``'file'`` or ``'dir'``."""

    version: Optional[str] = None


@dataclass
class NoteFailure:
    note: Note

    error: Exception


@dataclass
class PushResult:
    """Outcome of pushing one project. A failure for one note does not prevent the others from being pushed."""

    succeeded: List[Note] = field(default_factory=list)

    failed: List[NoteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class SyncReport:
    """Outcome of a full two-way sync (see :meth:`notesync.sync.SyncEngine.sync`)."""

    uploaded: int = 0
    """Number of projects pushed without any failures."""

    downloaded: int = 0

    errors: List[str] = field(default_factory=list)

    projects: List[Project] = field(default_factory=list)
    """The projects as they exist on the remote after the push."""
