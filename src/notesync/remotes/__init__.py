"""Handles reading and writing objects in a remote, path-addressed file store.

:class:`notesync.remotes.base.RemoteRepo` defines the API.
:class:`notesync.remotes.github.GitHubRepo` talks to the GitHub contents API, while
:class:`notesync.remotes.memory.MemoryRepo` keeps objects in memory with the same versioning rules.
"""
