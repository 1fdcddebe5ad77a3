from datetime import datetime, timezone
import pytest
from notesync.models import Note, Project
from notesync.remotes.memory import MemoryRepo
from notesync.snapshots import SnapshotStore
from notesync.storage.memory import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return SnapshotStore(storage, rand=lambda: 1.0)


@pytest.fixture
def repo():
    return MemoryRepo()


def make_note(id='n1', project_id='p1', title='Hello', content='<p>Hi</p>'):
    when = datetime(2021, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    return Note(id=id, project_id=project_id, title=title, content=content, created_at=when, updated_at=when)


def make_project(id='p1', name='Demo', notes=None):
    when = datetime(2021, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    return Project(id=id, name=name, description='A demo project', created_at=when, updated_at=when,
                   notes=notes if notes is not None else [make_note(project_id=id)])
