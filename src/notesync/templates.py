"""Renders a note into text using a user-supplied template, e.g. to paste it into a work-item tracker.

Templates are Mako templates limited to ``${name}`` placeholders, where the name must be one of
:data:`PLACEHOLDERS`. Any other text, including Mako syntax such as ``%`` lines or ``##`` comments, is copied to the
output unchanged, so Markdown headings work as expected. For example:

.. code-block:: markdown

   ## ${title}

   Exported from ${project} on ${date} at ${time}.

   ${content}
"""

from datetime import datetime
import re
from typing import Dict, List, Optional

from mako.exceptions import MakoException
from mako.template import Template

from notesync.errors import FormatError
from notesync.models import Note, Project

DEFAULT_TEMPLATE = '# ${title}\n\n${content}'

PLACEHOLDERS = frozenset(['title', 'content', 'project', 'created', 'updated', 'characters', 'lines', 'date',
                          'time'])

DATE_FORMAT = '%d/%m/%Y'
TIME_FORMAT = '%H:%M'

EXPR_RE = re.compile(r'\$\{(.*?)\}', re.DOTALL)
_TEXT_END = '</%text>'


def placeholders(template: str) -> List[str]:
    """Returns the placeholder names used in the template, in order of first use.

    Raises :exc:`notesync.errors.FormatError` if any placeholder is not one of :data:`PLACEHOLDERS`.
    """
    names = []
    for match in EXPR_RE.finditer(template):
        name = match.group(1).strip()
        if name not in PLACEHOLDERS:
            raise FormatError(f'Unknown template placeholder ${{{match.group(1)}}}; '
                              f'allowed placeholders are: {", ".join(sorted(PLACEHOLDERS))}')
        if name not in names:
            names.append(name)
    return names


def _to_mako(template: str) -> str:
    parts = []
    prev = 0
    for match in EXPR_RE.finditer(template):
        parts.append(_literal(template[prev:match.start()]))
        parts.append(f'${{{match.group(1).strip()}}}')
        prev = match.end()
    parts.append(_literal(template[prev:]))
    return ''.join(parts)


def _literal(text: str) -> str:
    if not text:
        return ''
    if _TEXT_END in text:
        raise FormatError(f'Templates may not contain {_TEXT_END}')
    return f'<%text>{text}{_TEXT_END}'


def values_for(note: Note, project: Optional[Project] = None, now: Optional[datetime] = None) -> Dict[str, str]:
    now = now or datetime.now()
    return {
        'title': note.title,
        'content': note.content,
        'project': project.name if project else '',
        'created': note.created_at.strftime(f'{DATE_FORMAT} {TIME_FORMAT}'),
        'updated': note.updated_at.strftime(f'{DATE_FORMAT} {TIME_FORMAT}'),
        'characters': str(note.character_count),
        'lines': str(note.line_count),
        'date': now.strftime(DATE_FORMAT),
        'time': now.strftime(TIME_FORMAT),
    }


def render_note(template: str, note: Note, project: Optional[Project] = None, now: Optional[datetime] = None) -> str:
    """Fills in the template's placeholders with details of the note.

    The template is checked before anything is rendered; :exc:`notesync.errors.FormatError` is raised if it uses a
    placeholder that is not in :data:`PLACEHOLDERS`.
    """
    placeholders(template)
    try:
        compiled = Template(text=_to_mako(template), strict_undefined=True)
        return compiled.render(**values_for(note, project, now))
    except MakoException as e:
        raise FormatError(f'Cannot render template: {e}', e)
