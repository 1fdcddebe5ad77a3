from datetime import datetime
import pytest
from notesync.errors import FormatError
from notesync.templates import DEFAULT_TEMPLATE, placeholders, render_note
from conftest import make_note, make_project

NOW = datetime(2022, 3, 4, 15, 16)


def test_default_template():
    assert render_note(DEFAULT_TEMPLATE, make_note(), now=NOW) == '# Hello\n\n<p>Hi</p>'


def test_all_placeholders():
    template = ('${title}|${content}|${project}|${created}|${updated}|${characters}|${lines}|${date}|${time}')
    note = make_note(content='<p>one</p>\n<p>two</p>')
    assert render_note(template, note, make_project(), NOW) == (
        'Hello|<p>one</p>\n<p>two</p>|Demo|03/02/2021 04:05|03/02/2021 04:05|7|2|04/03/2022|15:16')


def test_project_optional():
    assert render_note('[${project}]', make_note(), now=NOW) == '[]'


def test_whitespace_in_placeholder():
    assert render_note('${ title }', make_note(), now=NOW) == 'Hello'


def test_values_are_not_escaped_or_evaluated():
    note = make_note(title='${content} <b>&amp;</b>', content='% if True:\n## not a comment')
    assert render_note('${title}\n${content}', note, now=NOW) == '${content} <b>&amp;</b>\n% if True:\n## not a comment'


def test_literal_text_passes_through():
    template = '## ${title}\n% not control\n<%text>\n100% done'
    assert render_note(template, make_note(), now=NOW) == '## Hello\n% not control\n<%text>\n100% done'


@pytest.mark.parametrize('template', [
    '${nope}',
    '${title.upper()}',
    '${__import__("os")}',
    'fine ${title} then ${content | h}',
    '${}',
])
def test_unknown_placeholders_rejected(template):
    with pytest.raises(FormatError):
        render_note(template, make_note(), now=NOW)


def test_error_lists_allowed_placeholders():
    with pytest.raises(FormatError) as info:
        placeholders('${author}')
    assert '${author}' in str(info.value)
    assert 'title' in str(info.value)


def test_placeholders():
    assert placeholders('${title} ${date} ${title}') == ['title', 'date']
    assert placeholders('no placeholders') == []


def test_text_end_tag_rejected():
    with pytest.raises(FormatError):
        render_note('before </%text> after ${title}', make_note(), now=NOW)
