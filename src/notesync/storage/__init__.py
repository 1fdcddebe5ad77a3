"""Key/value media that local snapshots and backups are kept in.

:class:`notesync.storage.base.Storage` defines the API.
:class:`notesync.storage.memory.MemoryStorage` keeps everything in memory,
:class:`notesync.storage.directory.DirectoryStorage` keeps one file per key, and
:class:`notesync.storage.sqlite.SqliteStorage` keeps everything in a single SQLite database file.
"""
