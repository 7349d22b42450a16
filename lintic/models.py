"""Data model for a single Lintic run."""
from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from typing import Any


class FileStatus(Enum):
    """Status of a file within a pull request, as reported by GitHub."""
    ADDED = 'added'
    MODIFIED = 'modified'
    REMOVED = 'removed'
    RENAMED = 'renamed'
    COPIED = 'copied'
    CHANGED = 'changed'
    UNCHANGED = 'unchanged'

    @classmethod
    def parse(cls, value: str | None) -> FileStatus:
        """Map a GitHub status string, treating unknown values as modified."""
        try:
            return cls(value)
        except ValueError:
            return cls.MODIFIED


class FileOutcome(Enum):
    """Terminal state of one file in the pipeline."""
    CLEAN = 'clean'
    UNCHANGED = 'unchanged'
    FIXED = 'fixed'
    FAILED = 'failed'


@dataclass(frozen=True)
class ChangedFile:
    """A file touched by the pull request."""
    path: str
    status: FileStatus
    patch: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChangedFile:
        """Create from a GitHub pull request file entry."""
        return cls(
            path=data.get('filename', ''),
            status=FileStatus.parse(data.get('status')),
            patch=data.get('patch'),
        )


@dataclass(frozen=True)
class Offense:
    """A single RuboCop rule violation."""
    line: int | None
    message: str
    rule_id: str

    @property
    def line_label(self) -> str:
        """Line number for display, or 'unknown' when absent."""
        return str(self.line) if self.line is not None else 'unknown'


@dataclass(frozen=True)
class FixResult:
    """Corrected content for one file and the explanation of the change."""
    fixed_content: str
    summary: str | None = None


@dataclass(frozen=True)
class SummaryEntry:
    """Summary of the fix applied to one file."""
    path: str
    summary: str


@dataclass(frozen=True)
class PullRequestInfo:
    """The parts of a pull request the pipeline needs."""
    number: int
    head_sha: str
    head_ref: str


@dataclass
class ProcessingContext:
    """State shared across the files of one pull request run."""
    repo: str
    pr_number: int
    head_sha: str
    head_ref: str
    timestamp: str
    accumulated_summaries: list[SummaryEntry] = field(default_factory=list)

    def add_summary(self, path: str, summary: str) -> None:
        """Record the summary of a published fix."""
        self.accumulated_summaries.append(SummaryEntry(path=path, summary=summary))


@dataclass
class FileReport:
    """What happened to one file."""
    path: str
    outcome: FileOutcome
    offense_count: int = 0
    pull_request_url: str | None = None
    error: str | None = None


@dataclass
class RunReport:
    """Aggregated result of a pull request run."""
    files: list[FileReport] = field(default_factory=list)

    @property
    def fixes_applied(self) -> int:
        """Number of files for which a fix PR was opened."""
        return sum(1 for report in self.files if report.outcome is FileOutcome.FIXED)

    @property
    def pull_request_urls(self) -> list[str]:
        """URLs of the fix PRs, in processing order."""
        return [r.pull_request_url for r in self.files if r.pull_request_url]

    def count(self, outcome: FileOutcome) -> int:
        """Number of files that ended in the given state."""
        return sum(1 for report in self.files if report.outcome is outcome)
