from datetime import datetime, timedelta, timezone
import pytest
from freezegun import freeze_time
from notesync.models import Note, Project, Snapshot, PushResult, NoteFailure, strip_tags, parse_datetime,\
    generate_id
from conftest import make_note, make_project


def test_strip_tags():
    assert strip_tags('') == ''
    assert strip_tags('plain text') == 'plain text'
    assert strip_tags('<p>Hi</p>') == 'Hi'
    assert strip_tags('<p>one</p>\n<p><b>two</b></p>') == 'one\ntwo'


def test_derived_counts():
    note = Note(id='n1', project_id='p1', content='<p>Hi</p>')
    assert note.character_count == 2
    assert note.line_count == 1
    assert note.file_size == 9

    note.content = '<p>one</p>\n<p>two</p>\nthree'
    assert note.character_count == len('one\ntwo\nthree')
    assert note.line_count == 3
    assert note.file_size == len('<p>one</p>\n<p>two</p>\nthree')


def test_derived_counts_empty_and_unicode():
    note = Note(id='n1', project_id='p1')
    assert (note.character_count, note.line_count, note.file_size) == (0, 1, 0)
    note.content = 'héllo'
    assert note.character_count == 5
    assert note.file_size == 6


def test_derived_counts_not_constructor_arguments():
    with pytest.raises(TypeError):
        Note(id='n1', project_id='p1', character_count=99)


@pytest.mark.parametrize('content', ['', 'a', 'a\nb', '<div>a<br>b</div>\n\n', '<p>x</p>\n' * 5, 'tab\there'])
def test_derived_counts_match_stripped_content(content):
    note = Note(id='n1', project_id='p1', content=content)
    text = strip_tags(content)
    assert note.character_count == len(text)
    assert note.line_count == len(text.split('\n'))


def test_edit():
    note = make_note()
    with freeze_time('2022-01-01T00:00:00Z'):
        note.edit(content='<p>Changed</p>')
    assert note.title == 'Hello'
    assert note.content == '<p>Changed</p>'
    assert note.character_count == 7
    assert note.updated_at == datetime(2022, 1, 1, tzinfo=timezone.utc)
    note.edit(title='New title')
    assert note.title == 'New title'
    assert note.content == '<p>Changed</p>'


def test_parse_datetime():
    assert parse_datetime('2021-02-03T04:05:06.789Z') == datetime(2021, 2, 3, 4, 5, 6, 789000, tzinfo=timezone.utc)
    assert parse_datetime('2021-02-03T04:05:06+00:00') == datetime(2021, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    assert parse_datetime('2021-02-03T04:05:06') == datetime(2021, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    assert (parse_datetime('2021-02-03T04:05:06-02:00')
            == datetime(2021, 2, 3, 4, 5, 6, tzinfo=timezone(timedelta(hours=-2))))
    with pytest.raises(ValueError):
        parse_datetime('yesterday')


def test_generate_id():
    assert generate_id() != generate_id()


def test_note_json_roundtrip():
    note = make_note()
    note.last_saved = datetime(2021, 3, 4, tzinfo=timezone.utc)
    data = note.as_json()
    assert data['projectId'] == 'p1'
    assert data['createdAt'] == '2021-02-03T04:05:06+00:00'
    assert data['characterCount'] == 2
    assert Note.from_json(data) == note


def test_note_from_json_accepts_web_app_dates():
    data = {'id': 'n1', 'projectId': 'p1', 'title': 'T', 'content': 'x', 'createdAt': '2021-02-03T04:05:06.000Z',
            'updatedAt': '2021-02-03T04:05:06.000Z', 'lastSaved': None, 'characterCount': 500}
    note = Note.from_json(data)
    assert note.created_at == datetime(2021, 2, 3, 4, 5, 6, tzinfo=timezone.utc)
    assert note.last_saved is None
    assert note.character_count == 1


def test_project_json_roundtrip():
    project = make_project(notes=[make_note(id='n1'), make_note(id='n2', title='Second')])
    assert Project.from_json(project.as_json()) == project


def test_project_metadata_json():
    project = make_project()
    assert project.metadata_json() == {
        'id': 'p1',
        'name': 'Demo',
        'description': 'A demo project',
        'createdAt': '2021-02-03T04:05:06+00:00',
        'updatedAt': '2021-02-03T04:05:06+00:00',
        'notesCount': 1,
    }


def test_snapshot_lookups():
    first = make_project(id='p1', name='First', notes=[make_note(id='n1', project_id='p1')])
    second = make_project(id='p2', name='Second', notes=[make_note(id='n2', project_id='p2')])
    snapshot = Snapshot(projects=[first, second])
    assert snapshot.project('p2') is second
    assert snapshot.project('nope') is None
    assert snapshot.project_named('second') is second
    assert snapshot.note('n2').project_id == 'p2'
    assert snapshot.note('n3') is None
    assert first.note('n2') is None


def test_snapshot_json_roundtrip():
    snapshot = Snapshot(projects=[make_project()], settings={'theme': {'mode': 'dark'}}, current_project_id='p1',
                        current_note_id='n1')
    assert Snapshot.from_json(snapshot.as_json()) == snapshot


def test_push_result_ok():
    assert PushResult().ok
    assert not PushResult(failed=[NoteFailure(make_note(), Exception('boom'))]).ok


def test_from_json_rejects_wrong_types():
    for value in [12345, None, ['2021-01-01']]:
        with pytest.raises(ValueError):
            parse_datetime(value)
    with pytest.raises(TypeError):
        Note.from_json('oops')
    with pytest.raises(TypeError):
        Project.from_json(['oops'])
    with pytest.raises(TypeError):
        Snapshot.from_json({'projects': {'p1': {}}})
    data = make_note().as_json()
    data['content'] = 5
    with pytest.raises(TypeError):
        Note.from_json(data)
    data = make_project().as_json()
    data['notes'] = 'oops'
    with pytest.raises(TypeError):
        Project.from_json(data)
