"""Keeps projects of notes in local storage, with backups, and syncs them with a remote repository.

If you installed via ``pip``, run ``notesync -h`` to get help.

To use the Python API, look at :class:`notesync.api.Notesync`
"""
