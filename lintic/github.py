"""Minimal GitHub REST client covering the calls Lintic makes."""
from __future__ import annotations

import base64
import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from lintic import __version__
from lintic.config import GitHubConfig
from lintic.errors import GitHubError
from lintic.models import ChangedFile
from lintic.models import PullRequestInfo
from lintic.output import logger

# GitHub caps per_page at 100 for pull request files
FILES_PER_PAGE = 100


class GitHubClient:
    """Thin wrapper over the GitHub REST API v3.

    Every failure (HTTP status, network, undecodable body) is raised as
    GitHubError; callers decide whether that is fatal for the run or only
    for the current file.
    """

    def __init__(self, config: GitHubConfig) -> None:
        self.token = config.token
        self.api_url = config.api_url.rstrip('/')
        self.timeout = config.timeout

    def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        query: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body."""
        url = f'{self.api_url}{path}'
        if query:
            url = f'{url}?{urllib.parse.urlencode(query)}'

        data = json.dumps(payload).encode('utf-8') if payload is not None else None
        req = urllib.request.Request(
            url,
            data=data,
            method=method,
            headers={
                'Accept': 'application/vnd.github+json',
                'Authorization': f'Bearer {self.token}',
                'Content-Type': 'application/json',
                'User-Agent': f'lintic/{__version__}',
                'X-GitHub-Api-Version': '2022-11-28',
            },
        )
        logger.debug(f'GitHub {method} {path}')

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                body = response.read().decode('utf-8')
        except urllib.error.HTTPError as e:
            detail = _error_message(e)
            raise GitHubError(f'{method} {path} returned {e.code}: {detail}') from e
        except (urllib.error.URLError, OSError) as e:
            raise GitHubError(f'{method} {path} failed: {e}') from e

        if not body:
            return {}
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise GitHubError(f'{method} {path} returned invalid JSON') from e

    def verify_credentials(self) -> str:
        """Check the token by fetching the authenticated user, returning the login."""
        try:
            user = self._request('GET', '/user')
        except GitHubError as e:
            raise GitHubError(f'GitHub authentication failed: {e}') from e
        login = user.get('login', '')
        logger.debug(f'Authenticated to GitHub as {login or "unknown user"}')
        return login

    def list_pull_request_files(self, repo: str, pr_number: int) -> list[ChangedFile]:
        """List every file changed by a pull request, following pagination."""
        files: list[ChangedFile] = []
        page = 1
        while True:
            batch = self._request(
                'GET',
                f'/repos/{repo}/pulls/{pr_number}/files',
                query={'per_page': FILES_PER_PAGE, 'page': page},
            )
            files.extend(ChangedFile.from_dict(item) for item in batch)
            if len(batch) < FILES_PER_PAGE:
                return files
            page += 1

    def get_pull_request(self, repo: str, pr_number: int) -> PullRequestInfo:
        """Fetch the head commit and branch of a pull request."""
        data = self._request('GET', f'/repos/{repo}/pulls/{pr_number}')
        head = data.get('head') or {}
        if not head.get('sha') or not head.get('ref'):
            raise GitHubError(f'Pull request #{pr_number} has no head commit')
        return PullRequestInfo(number=pr_number, head_sha=head['sha'], head_ref=head['ref'])

    def get_contents(self, repo: str, path: str, ref: str) -> dict[str, Any]:
        """Fetch the contents entry (base64 content and blob SHA) of a file at ref."""
        return self._request(
            'GET',
            f'/repos/{repo}/contents/{urllib.parse.quote(path)}',
            query={'ref': ref},
        )

    def get_file_bytes(self, repo: str, path: str, ref: str) -> bytes:
        """Return the raw bytes of a file at ref."""
        entry = self.get_contents(repo, path, ref)
        if entry.get('encoding', 'base64') != 'base64' or 'content' not in entry:
            raise GitHubError(f'Unexpected content encoding for {path}')
        try:
            return base64.b64decode(entry['content'])
        except ValueError as e:
            raise GitHubError(f'Could not decode content of {path}') from e

    def create_ref(self, repo: str, branch: str, sha: str) -> None:
        """Create a branch pointing at sha."""
        self._request(
            'POST',
            f'/repos/{repo}/git/refs',
            payload={'ref': f'refs/heads/{branch}', 'sha': sha},
        )

    def update_file(
        self,
        repo: str,
        path: str,
        content: str,
        message: str,
        blob_sha: str,
        branch: str,
    ) -> dict[str, Any]:
        """Commit new content for path on branch, replacing blob_sha."""
        return self._request(
            'PUT',
            f'/repos/{repo}/contents/{urllib.parse.quote(path)}',
            payload={
                'message': message,
                'content': base64.b64encode(content.encode('utf-8')).decode('ascii'),
                'sha': blob_sha,
                'branch': branch,
            },
        )

    def create_pull_request(
        self,
        repo: str,
        base: str,
        head: str,
        title: str,
        body: str,
    ) -> str:
        """Open a pull request and return its URL."""
        data = self._request(
            'POST',
            f'/repos/{repo}/pulls',
            payload={'title': title, 'head': head, 'base': base, 'body': body},
        )
        return data.get('html_url', '')


def _error_message(error: urllib.error.HTTPError) -> str:
    """Extract GitHub's error message from an HTTP error response."""
    try:
        body = json.loads(error.read().decode('utf-8'))
    except (ValueError, OSError):
        return error.reason or 'unknown error'
    if isinstance(body, dict) and body.get('message'):
        return str(body['message'])
    return error.reason or 'unknown error'
