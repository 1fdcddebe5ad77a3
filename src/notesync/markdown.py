"""Converts notes to and from the Markdown documents stored in remote repositories.

A note is stored with a metadata header, followed by the title as a heading, followed by the content as-is:

.. code-block:: markdown

   ---
   id: 4Kq9mXh3CzXpSNKz6KxfLd
   title: "My Boring Note"
   created: 2021-02-03T04:05:06+00:00
   updated: 2021-02-03T04:05:06+00:00
   characters: 12
   lines: 1
   ---

   # My Boring Note

   <p>Hello world</p>

The layout is fixed so that documents written by other clients can be read, and vice versa.
"""

import json
import logging
from typing import Dict, List, Optional, Tuple

import yaml

from notesync.models import Note, parse_datetime, utc_now

logger = logging.getLogger(__name__)

DELIMITER = '---'


def _quote(value: str) -> str:
    # Written as a JSON string literal; _unquote reads it back exactly.
    return json.dumps(value, ensure_ascii=False)


def _unquote(value: str) -> str:
    if not value.startswith('"'):
        return value
    try:
        parsed = json.loads(value)
        if isinstance(parsed, str):
            return parsed
    except ValueError:
        pass
    # written by some other tool: try YAML double-quoted rules, then give up on escapes
    try:
        parsed = yaml.safe_load(value)
        if isinstance(parsed, str):
            return parsed
    except yaml.YAMLError:
        pass
    return value.replace('"', '')


def encode_note(note: Note) -> str:
    """Returns the document text for the given note."""
    lines = [
        DELIMITER,
        f'id: {note.id}',
        f'title: {_quote(note.title)}',
        f'created: {note.created_at.isoformat()}',
        f'updated: {note.updated_at.isoformat()}',
        f'characters: {note.character_count}',
        f'lines: {note.line_count}',
        DELIMITER,
        '',
        f'# {" ".join(note.title.splitlines())}',
        '',
        note.content or '',
    ]
    return '\n'.join(lines)


def _extract_meta(text: str) -> Tuple[Optional[Dict[str, str]], List[str]]:
    """Splits a document into its metadata and the lines following the metadata block.

    If the document does not start with a complete metadata block, the metadata is None and every line of the
    document is returned.
    """
    lines = text.split('\n')
    if not lines[0].rstrip('\r') == DELIMITER:
        return None, lines
    for end in range(1, len(lines)):
        if lines[end].rstrip('\r') == DELIMITER:
            break
    else:
        return None, lines
    meta = {}
    for line in lines[1:end]:
        key, sep, value = line.partition(':')
        if not sep:
            continue
        meta[key.strip()] = _unquote(value.strip())
    return meta, lines[end + 1:]


def _skip_heading(lines: List[str]) -> Tuple[str, List[str]]:
    heading = ''
    if lines and not lines[0].strip():
        lines = lines[1:]
    if lines and lines[0].startswith('# '):
        heading = lines[0][2:].rstrip('\r')
        lines = lines[1:]
        if lines and not lines[0].strip():
            lines = lines[1:]
    return heading, lines


def _parse_date(meta: Dict[str, str], key: str, fallback_id: str):
    value = meta.get(key)
    if value:
        try:
            return parse_datetime(value)
        except ValueError:
            logger.warning('Ignoring invalid %s date %r in note %s', key, value, fallback_id)
    return utc_now()


def decode_note(text: str, fallback_id: str, project_id: str = '') -> Note:
    """Parses a document produced by :func:`encode_note`.

    ``fallback_id`` is used when the metadata has no ``id``; normally it is the filename without its extension.
    The character, line and size counts are recalculated from the content rather than read from the metadata.

    This never raises for malformed input. A document without a complete metadata block is treated as having no
    metadata, and its whole text becomes the content.
    """
    meta, lines = _extract_meta(text)
    if meta is None:
        meta = {}
        heading = ''
        content = text
    else:
        heading, lines = _skip_heading(lines)
        content = '\n'.join(lines)
    return Note(
        id=meta.get('id') or fallback_id,
        project_id=project_id,
        title=meta.get('title', heading),
        content=content,
        created_at=_parse_date(meta, 'created', fallback_id),
        updated_at=_parse_date(meta, 'updated', fallback_id))
