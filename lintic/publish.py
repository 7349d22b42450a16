"""Publishing a fix: branch, commit and pull request."""
from __future__ import annotations

from lintic.config import PublishConfig
from lintic.errors import GitHubError
from lintic.github import GitHubClient
from lintic.models import FixResult
from lintic.models import ProcessingContext
from lintic.models import SummaryEntry
from lintic.output import logger

COMMIT_MESSAGE = '🤖 Fix linting errors with Lintic'
PROJECT_URL = 'https://github.com/shindi-renuo/lintic'


def build_branch_name(prefix: str, pr_number: int, timestamp: str, ordinal: int) -> str:
    """Name of the fix branch for the ordinal-th file of a run.

    Two runs for the same PR started within the same second collide.
    """
    return f'{prefix}fix-pr-{pr_number}-{timestamp}-{ordinal}'


def build_pr_title(pr_number: int, path: str) -> str:
    """Title of a fix pull request."""
    return f'🧹 Fix linting errors in {path} (PR #{pr_number})'


def build_pr_body(pr_number: int, summaries: list[SummaryEntry]) -> str:
    """Body of a fix pull request, listing the summary of every fix so far."""
    sections = '\n\n'.join(
        f'#### `{entry.path}`\n\n{entry.summary}' for entry in summaries
    ) or '_No summaries were generated._'

    return f"""## 🤖 Automated Linting Fixes

This PR was automatically created by **Lintic** to fix RuboCop linting errors found in PR #{pr_number}.

### What was fixed:

{sections}

### How to use:
1. Review the changes in this PR
2. If satisfied, merge this PR into your feature branch
3. Your original PR will then have clean, linted code

---
*Generated automatically by [Lintic]({PROJECT_URL}) 🚀*
"""


class ChangeApplier:
    """Publishes one file's fix as a branch plus a pull request onto the PR head."""

    def __init__(self, client: GitHubClient, config: PublishConfig) -> None:
        self.client = client
        self.config = config

    def apply(
        self,
        context: ProcessingContext,
        path: str,
        fix_result: FixResult,
        ordinal: int,
    ) -> str:
        """Create the fix branch, commit the fixed file and open the PR.

        Returns the URL of the new pull request. Each step raises
        GitHubError naming the step that failed.
        """
        branch = self.create_fix_branch(context, ordinal)
        self.commit_fixed_content(context.repo, branch, path, fix_result.fixed_content)

        summaries = list(context.accumulated_summaries)
        if fix_result.summary:
            summaries.append(SummaryEntry(path=path, summary=fix_result.summary))
        return self.create_fix_pull_request(context, branch, path, summaries)

    def create_fix_branch(self, context: ProcessingContext, ordinal: int) -> str:
        """Branch off the original PR's head commit."""
        branch = build_branch_name(
            self.config.branch_prefix, context.pr_number, context.timestamp, ordinal,
        )
        try:
            self.client.create_ref(context.repo, branch, context.head_sha)
        except GitHubError as e:
            raise GitHubError(f'Failed to create branch {branch}: {e}') from e
        logger.info(f'Created branch: {branch}')
        return branch

    def commit_fixed_content(self, repo: str, branch: str, path: str, content: str) -> None:
        """Replace path on branch with the fixed content."""
        try:
            current = self.client.get_contents(repo, path, branch)
            blob_sha = current.get('sha')
            if not blob_sha:
                raise GitHubError(f'No blob SHA for {path} on {branch}')
            self.client.update_file(repo, path, content, COMMIT_MESSAGE, blob_sha, branch)
        except GitHubError as e:
            raise GitHubError(f'Failed to update file content: {e}') from e
        logger.debug(f'Committed fix for {path} to {branch}')

    def create_fix_pull_request(
        self,
        context: ProcessingContext,
        branch: str,
        path: str,
        summaries: list[SummaryEntry],
    ) -> str:
        """Open a PR from the fix branch onto the original PR's head branch."""
        title = build_pr_title(context.pr_number, path)
        body = build_pr_body(context.pr_number, summaries)
        try:
            url = self.client.create_pull_request(
                context.repo, context.head_ref, branch, title, body,
            )
        except GitHubError as e:
            raise GitHubError(f'Failed to create pull request: {e}') from e
        logger.info(f'Created fix PR: {url}')
        return url
