"""Helpers for deciding where projects and notes live in a remote repository.

The layout is::

    projects/<slug of project name>/project.json
    projects/<slug of project name>/notes/<slug of note title, or of note id>.md
"""

import re
from typing import Dict

from notesync.models import Note, Project

PROJECTS_DIR = 'projects'
PROJECT_META_FILENAME = 'project.json'
NOTES_DIRNAME = 'notes'
NOTE_SUFFIX = '.md'


def sanitize(name: str) -> str:
    """Converts a name into a string that is safe to use as a single path segment.

    The following adjustments are made:

    * Characters are converted to lowercase
    * Only the letters a-z, digits 0-9, underscores and dashes are kept; all other characters are replaced with dashes
    * Consecutive dashes are collapsed to a single dash
    * Leading and trailing dashes are removed

    For example, "Everything is awful!" becomes ``everything-is-awful``. Applying the function to its own output
    returns the output unchanged.

    The result may be an empty string (for example, for a name made only of punctuation), so callers need a fallback.
    """
    slug = name.lower()
    slug = re.sub(r'[^a-z0-9_-]', '-', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')


def project_dir(name: str) -> str:
    return f'{PROJECTS_DIR}/{sanitize(name)}'


def project_meta_path(name: str) -> str:
    return f'{project_dir(name)}/{PROJECT_META_FILENAME}'


def notes_dir(name: str) -> str:
    return f'{project_dir(name)}/{NOTES_DIRNAME}'


def note_stem(note: Note) -> str:
    return sanitize(note.title or '') or sanitize(note.id) or 'untitled'


def note_filename(note: Note) -> str:
    """Returns the filename for the note, based on its title, or its id if the title has no usable characters."""
    return f'{note_stem(note)}{NOTE_SUFFIX}'


def note_paths(project: Project) -> Dict[str, str]:
    """Returns a dict mapping the id of each note in the project to the path it should be stored at.

    Notes whose titles produce the same filename would otherwise overwrite one another, so for the second and later
    notes with a given filename, the note id is appended to the name.
    """
    result = {}
    taken = set()
    base = notes_dir(project.name)
    for note in project.notes:
        stem = note_stem(note)
        while stem in taken:
            stem = f'{stem}-{sanitize(note.id) or len(taken)}'
        taken.add(stem)
        result[note.id] = f'{base}/{stem}{NOTE_SUFFIX}'
    return result
