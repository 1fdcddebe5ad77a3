"""Provides the :class:`GitHubRepo` class."""

import base64
import binascii
import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from notesync.conf import GitHubRemoteConf
from notesync.errors import AuthError, ConflictError, FormatError, NetworkError, NotFoundError
from notesync.models import RemoteEntry, RemoteObject
from notesync.remotes.base import RemoteRepo

logger = logging.getLogger(__name__)

_CONFLICT_STATUSES = {409, 412, 422}
_AUTH_STATUSES = {401, 403}


class GitHubRepo(RemoteRepo):
    """Stores files in a GitHub repository using the REST contents API.

    Every request is pinned to the configured branch, and each write becomes a commit on it. The version token of a
    file is its blob SHA. GitHub responds to a stale SHA with 409, and to a create (no SHA) over an existing file
    with 422; both are reported as :exc:`notesync.errors.ConflictError`.

    Remember to call :meth:`close` when done with the instance, or use the instance as a context manager.

    .. attribute:: conf
       :type: notesync.conf.GitHubRemoteConf
    """
    def __init__(self, conf: GitHubRemoteConf, transport: httpx.BaseTransport = None):
        self.conf = conf
        headers = {
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': '2022-11-28',
        }
        if conf.token:
            headers['Authorization'] = f'Bearer {conf.token}'
        self.client = httpx.Client(base_url=conf.base_url, headers=headers, timeout=conf.timeout,
                                   transport=transport)

    def _repo_url(self) -> str:
        return f'/repos/{quote(self.conf.owner)}/{quote(self.conf.repository)}'

    def _contents_url(self, path: str) -> str:
        return f'{self._repo_url()}/contents/{quote(path.strip("/"))}'

    def _request(self, method: str, url: str, path: str, **kwargs) -> httpx.Response:
        if not self.conf.token:
            raise AuthError('No GitHub token is configured', path)
        logger.debug('%s %s', method, url)
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f'{method} {path} failed: {e}', path, e)
        if response.status_code in _AUTH_STATUSES:
            raise AuthError(f'GitHub rejected the credential ({response.status_code}) for {method} {path}', path)
        return response

    def _json(self, response: httpx.Response, path: str):
        try:
            return response.json()
        except ValueError as e:
            raise FormatError(f'Response for {path} is not JSON', e)

    def _unexpected(self, response: httpx.Response, method: str, path: str) -> NetworkError:
        return NetworkError(f'Unexpected response {response.status_code} for {method} {path}: {response.text[:200]}',
                            path)

    def test_connection(self) -> str:
        """Checks that the repository is reachable with the configured credential and returns its full name."""
        response = self._request('GET', self._repo_url(), '')
        if response.status_code == 404:
            raise NotFoundError(f'Repository {self.conf.owner}/{self.conf.repository} not found')
        if not response.status_code == 200:
            raise self._unexpected(response, 'GET', '')
        return self._json(response, '').get('full_name', f'{self.conf.owner}/{self.conf.repository}')

    def get(self, path: str) -> Optional[RemoteObject]:
        response = self._request('GET', self._contents_url(path), path, params={'ref': self.conf.branch})
        if response.status_code == 404:
            return None
        if not response.status_code == 200:
            raise self._unexpected(response, 'GET', path)
        data = self._json(response, path)
        if not isinstance(data, dict) or not data.get('type') == 'file':
            raise FormatError(f'Path is not a file: {path}')
        if not data.get('encoding') == 'base64':
            raise FormatError(f'Content of {path} was not returned as base64')
        try:
            content = base64.b64decode(data['content']).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise FormatError(f'Content of {path} is not UTF-8 text', e)
        return RemoteObject(content, data['sha'])

    def put(self, path: str, content: str, message: str, version: Optional[str] = None) -> str:
        body = {
            'message': message,
            'content': base64.b64encode(content.encode('utf-8')).decode('ascii'),
            'branch': self.conf.branch,
        }
        if version:
            body['sha'] = version
        response = self._request('PUT', self._contents_url(path), path, json=body)
        if response.status_code in _CONFLICT_STATUSES:
            raise ConflictError(f'Version {version} of {path} is not current ({response.status_code})', path)
        if response.status_code == 404:
            raise NotFoundError(f'Cannot write {path}: repository or branch not found', path)
        if response.status_code not in (200, 201):
            raise self._unexpected(response, 'PUT', path)
        try:
            return self._json(response, path)['content']['sha']
        except (KeyError, TypeError) as e:
            raise FormatError(f'Response for {path} has no content SHA', e)

    def delete(self, path: str, message: str, version: str) -> None:
        body = {
            'message': message,
            'sha': version,
            'branch': self.conf.branch,
        }
        response = self._request('DELETE', self._contents_url(path), path, json=body)
        if response.status_code == 404:
            raise NotFoundError(f'Cannot delete {path}: it does not exist', path)
        if response.status_code in _CONFLICT_STATUSES:
            raise ConflictError(f'Version {version} of {path} is not current ({response.status_code})', path)
        if not response.status_code == 200:
            raise self._unexpected(response, 'DELETE', path)

    def list(self, path: str) -> List[RemoteEntry]:
        response = self._request('GET', self._contents_url(path), path, params={'ref': self.conf.branch})
        if response.status_code == 404:
            return []
        if not response.status_code == 200:
            raise self._unexpected(response, 'GET', path)
        data = self._json(response, path)
        if isinstance(data, dict):
            data = [data]
        entries = [RemoteEntry(name=item['name'],
                               path=item['path'],
                               type='dir' if item.get('type') == 'dir' else 'file',
                               version=item.get('sha'))
                   for item in data]
        entries.sort(key=lambda e: e.name)
        return entries

    def close(self) -> None:
        self.client.close()
