"""Tests for lintic.models."""
from __future__ import annotations

from lintic.models import ChangedFile
from lintic.models import FileOutcome
from lintic.models import FileReport
from lintic.models import FileStatus
from lintic.models import Offense
from lintic.models import ProcessingContext
from lintic.models import RunReport
from lintic.models import SummaryEntry


class TestChangedFile:
    """Tests for ChangedFile."""

    def test_from_dict(self) -> None:
        """Test a GitHub file entry is converted."""
        file = ChangedFile.from_dict({'filename': 'a.rb', 'status': 'added', 'patch': '+x'})

        assert file == ChangedFile(path='a.rb', status=FileStatus.ADDED, patch='+x')

    def test_unknown_status(self) -> None:
        """Test statuses GitHub may add later are treated as modified."""
        assert ChangedFile.from_dict({'filename': 'a.rb', 'status': 'mystery'}).status is FileStatus.MODIFIED

    def test_missing_patch(self) -> None:
        """Test large or binary files come without a patch."""
        assert ChangedFile.from_dict({'filename': 'a.rb', 'status': 'modified'}).patch is None


def test_offense_line_label() -> None:
    assert Offense(line=4, message='m', rule_id='r').line_label == '4'
    assert Offense(line=None, message='m', rule_id='r').line_label == 'unknown'


def test_processing_context_accumulates_in_order() -> None:
    context = ProcessingContext(
        repo='octo/widgets', pr_number=7, head_sha='abc123', head_ref='main', timestamp='ts',
    )

    context.add_summary('a.rb', '- a')
    context.add_summary('b.rb', '- b')

    assert context.accumulated_summaries == [
        SummaryEntry(path='a.rb', summary='- a'),
        SummaryEntry(path='b.rb', summary='- b'),
    ]


def test_run_report_counts() -> None:
    report = RunReport(files=[
        FileReport(path='a.rb', outcome=FileOutcome.FIXED, pull_request_url='https://x/1'),
        FileReport(path='b.rb', outcome=FileOutcome.FAILED, error='boom'),
        FileReport(path='c.rb', outcome=FileOutcome.FIXED, pull_request_url='https://x/2'),
    ])

    assert report.fixes_applied == 2
    assert report.count(FileOutcome.FAILED) == 1
    assert report.pull_request_urls == ['https://x/1', 'https://x/2']
