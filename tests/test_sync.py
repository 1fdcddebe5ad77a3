import json
import pytest
from notesync.errors import AuthError, ConflictError, FormatError, NetworkError, PathError
from notesync.markdown import encode_note
from notesync.remotes.memory import MemoryRepo
from notesync.sync import SyncEngine
from conftest import make_note, make_project


class StaleRepo(MemoryRepo):
    """Simulates another client updating a file between our read of its version and our write."""

    def __init__(self, stale_path, files=None):
        super().__init__(files)
        self.stale_path = stale_path

    def put(self, path, content, message, version=None):
        if path == self.stale_path and path in self.files:
            super().put(path, 'changed elsewhere', 'other client', self.files[path].version)
        return super().put(path, content, message, version)


class UnreadableRepo(MemoryRepo):
    def __init__(self, bad_path, files=None):
        super().__init__(files)
        self.bad_path = bad_path

    def get(self, path):
        if path == self.bad_path:
            self.calls.append(('get', path))
            raise FormatError(f'Content of {path} is not UTF-8 text')
        return super().get(path)


class OfflineRepo(MemoryRepo):
    def put(self, path, content, message, version=None):
        raise NetworkError('offline', path)


def test_push_then_pull(repo):
    engine = SyncEngine(repo)
    result = engine.push_project(make_project())
    assert result.ok
    assert [n.id for n in result.succeeded] == ['n1']

    pulled = engine.pull_project('demo')
    assert len(pulled.notes) == 1
    assert pulled.notes[0].content == '<p>Hi</p>'
    assert pulled.notes[0] == make_note()
    assert pulled.id == 'p1'
    assert pulled.name == 'Demo'


def test_push_layout(repo):
    project = make_project(name='My Project', notes=[make_note(id='n1', title='First Note'),
                                                     make_note(id='n2', title='')])
    SyncEngine(repo).push_project(project)
    assert sorted(repo.files) == ['projects/my-project/notes/first-note.md',
                                  'projects/my-project/notes/n2.md',
                                  'projects/my-project/project.json']
    meta = json.loads(repo.files['projects/my-project/project.json'].content)
    assert meta == project.metadata_json()
    assert repo.files['projects/my-project/notes/first-note.md'].content == encode_note(project.notes[0])


def test_push_twice_updates(repo):
    engine = SyncEngine(repo)
    project = make_project()
    engine.push_project(project)
    project.notes[0].edit(content='<p>Changed</p>')
    project.name = 'Demo'
    assert engine.push_project(project).ok
    assert '<p>Changed</p>' in repo.files['projects/demo/notes/hello.md'].content


def test_push_is_sequential(repo):
    project = make_project(notes=[make_note(id='n1', title='A'), make_note(id='n2', title='B')])
    SyncEngine(repo).push_project(project)
    assert repo.calls == [
        ('get', 'projects/demo/project.json'),
        ('put', 'projects/demo/project.json'),
        ('get', 'projects/demo/notes/a.md'),
        ('put', 'projects/demo/notes/a.md'),
        ('get', 'projects/demo/notes/b.md'),
        ('put', 'projects/demo/notes/b.md'),
    ]


def test_push_conflict_continues():
    project = make_project(notes=[make_note(id='n1', title='A'), make_note(id='n2', title='B'),
                                  make_note(id='n3', title='C')])
    repo = StaleRepo('projects/demo/notes/b.md')
    engine = SyncEngine(repo)
    engine.push_project(project)

    project.notes[1].edit(content='<p>mine</p>')
    result = engine.push_project(project)
    assert not result.ok
    assert [n.id for n in result.succeeded] == ['n1', 'n3']
    assert len(result.failed) == 1
    assert result.failed[0].note.id == 'n2'
    assert isinstance(result.failed[0].error, ConflictError)
    assert repo.files['projects/demo/notes/b.md'].content == 'changed elsewhere'


def test_push_metadata_failure_raises():
    with pytest.raises(NetworkError):
        SyncEngine(OfflineRepo()).push_project(make_project())


def test_push_auth_failure_is_not_swallowed():
    class NoAuthRepo(MemoryRepo):
        def get(self, path):
            raise AuthError('no token', path)
    with pytest.raises(AuthError):
        SyncEngine(NoAuthRepo()).push_project(make_project())


def test_push_unusable_name(repo):
    with pytest.raises(PathError):
        SyncEngine(repo).push_project(make_project(name='!!!'))
    assert repo.calls == []


def test_pull_unusable_name(repo):
    with pytest.raises(PathError):
        SyncEngine(repo).pull_project('???')


def test_pull_missing_project(repo):
    assert SyncEngine(repo).pull_project('missing') is None


def test_pull_notes_without_metadata(repo):
    repo.put('projects/demo/notes/hello.md', encode_note(make_note()), 'm')
    assert SyncEngine(repo).pull_project('Demo') is None


def test_pull_invalid_metadata(repo):
    repo.put('projects/demo/project.json', '{"name": "no id"}', 'm')
    with pytest.raises(FormatError):
        SyncEngine(repo).pull_project('demo')


def test_pull_project_without_notes(repo):
    engine = SyncEngine(repo)
    engine.push_project(make_project(notes=[]))
    project = engine.pull_project('demo')
    assert project.notes == []


def test_pull_skips_other_files(repo):
    engine = SyncEngine(repo)
    engine.push_project(make_project())
    repo.put('projects/demo/notes/README.txt', 'not a note', 'm')
    repo.put('projects/demo/notes/sub/deep.md', 'nested', 'm')
    assert [n.id for n in engine.pull_project('demo').notes] == ['n1']


def test_pull_skips_unreadable_note():
    repo = UnreadableRepo(None)
    engine = SyncEngine(repo)
    assert engine.push_project(make_project(notes=[make_note(id='n1', title='A'), make_note(id='n2', title='B')])).ok
    repo.bad_path = 'projects/demo/notes/a.md'
    project = engine.pull_project('demo')
    assert [n.id for n in project.notes] == ['n2']


def test_pull_note_written_by_hand(repo):
    engine = SyncEngine(repo)
    engine.push_project(make_project(notes=[]))
    repo.put('projects/demo/notes/scratch.md', 'just some text', 'm')
    notes = engine.pull_project('demo').notes
    assert len(notes) == 1
    assert notes[0].id == 'scratch'
    assert notes[0].project_id == 'p1'
    assert notes[0].content == 'just some text'


def test_pull_all(repo):
    engine = SyncEngine(repo)
    assert engine.pull_all() == []
    engine.push_project(make_project(id='p1', name='One'))
    engine.push_project(make_project(id='p2', name='Two'))
    repo.put('projects/unpublished/notes/x.md', 'x', 'm')
    repo.put('projects/stray.txt', 'x', 'm')
    assert [p.id for p in engine.pull_all()] == ['p1', 'p2']


def test_pull_all_skips_foreign_directories(repo):
    engine = SyncEngine(repo)
    engine.push_project(make_project())
    repo.put('projects/!!!/README.md', 'made by hand', 'm')
    repo.put('projects/Not A Slug/project.json', '{}', 'm')
    assert [p.name for p in engine.pull_all()] == ['Demo']
    report = engine.sync([])
    assert report.downloaded == 1
    assert report.errors == []


def test_pull_all_skips_corrupt_metadata(repo):
    engine = SyncEngine(repo)
    engine.push_project(make_project(id='p1', name='Good'))
    repo.put('projects/broken/project.json', '{not json', 'm')
    repo.put('projects/nested/project.json/deeper.md', 'x', 'm')
    assert [p.id for p in engine.pull_all()] == ['p1']


def test_delete_note(repo):
    engine = SyncEngine(repo)
    project = make_project()
    engine.push_project(project)
    assert engine.delete_note(project, project.notes[0])
    assert 'projects/demo/notes/hello.md' not in repo.files
    assert not engine.delete_note(project, project.notes[0])
    with pytest.raises(ValueError):
        engine.delete_note(project, make_note(id='elsewhere'))


def test_delete_project(repo):
    engine = SyncEngine(repo)
    project = make_project()
    engine.push_project(project)
    engine.push_project(make_project(id='p2', name='Keep'))
    repo.put('projects/demo/notes/orphan.md', 'x', 'm')
    engine.delete_project(project)
    assert sorted(repo.files) == ['projects/keep/notes/hello.md', 'projects/keep/project.json']
    engine.delete_project(project)


def test_sync(repo):
    engine = SyncEngine(repo)
    engine.push_project(make_project(id='remote', name='Remote only'))
    local = [make_project(id='p1', name='Demo'), make_project(id='p2', name='???')]
    report = engine.sync(local)
    assert report.uploaded == 1
    assert report.downloaded == 2
    assert len(report.errors) == 1
    assert 'p2' in report.errors[0]
    assert sorted(p.id for p in report.projects) == ['p1', 'remote']


def test_sync_reports_note_failures():
    repo = StaleRepo('projects/demo/notes/hello.md')
    engine = SyncEngine(repo)
    project = make_project()
    engine.push_project(project)
    report = engine.sync([project])
    assert report.uploaded == 0
    assert report.downloaded == 1
    assert len(report.errors) == 1
    assert 'Hello' in report.errors[0]


def test_sync_reports_project_failures():
    report = SyncEngine(OfflineRepo()).sync([make_project()])
    assert report.uploaded == 0
    assert report.downloaded == 0
    assert report.errors == ['Failed to push project Demo: offline']
