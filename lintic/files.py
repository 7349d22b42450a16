"""Selecting and fetching the pull request files that RuboCop should see."""
from __future__ import annotations

from collections.abc import Iterable

from lintic.github import GitHubClient
from lintic.models import ChangedFile
from lintic.models import FileStatus
from lintic.output import logger


def is_lintable(file: ChangedFile, extensions: Iterable[str]) -> bool:
    """Check whether a changed file should be linted."""
    if file.status is FileStatus.REMOVED:
        return False
    # Extension-less scripts (shebang detection) are not considered
    return file.path.endswith(tuple(extensions))


def select_lintable_files(
    files: list[ChangedFile],
    extensions: Iterable[str],
) -> list[ChangedFile]:
    """Return the Ruby files of a pull request that still exist, in PR order."""
    extensions = tuple(extensions)
    selected = [f for f in files if is_lintable(f, extensions)]
    logger.info(f'Found {len(selected)} Ruby file(s) in PR')
    return selected


def fetch_file_content(
    client: GitHubClient,
    repo: str,
    file: ChangedFile,
    head_sha: str,
) -> str:
    """Fetch a file as pushed in the PR head commit.

    Returns an empty string for content that is not valid UTF-8 text; an
    empty string means there is nothing to lint. GitHubError propagates.
    """
    raw = client.get_file_bytes(repo, file.path, head_sha)
    try:
        return raw.decode('utf-8')
    except UnicodeDecodeError:
        logger.warning(f'{file.path} is not valid UTF-8 text, skipping')
        return ''
