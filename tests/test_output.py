"""Tests for lintic.output."""
from __future__ import annotations

import json

import pytest

from lintic.output import is_ci
from lintic.output import Logger


class TestLogger:
    """Tests for Logger."""

    def test_quiet_keeps_errors(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test quiet mode hides everything but errors."""
        log = Logger(quiet=True)

        log.info('hidden')
        log.warning('hidden too')
        log.error('shown')

        out = capsys.readouterr().out
        assert 'hidden' not in out
        assert 'shown' in out

    def test_debug_needs_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test debug lines only appear in verbose mode."""
        Logger().debug('quiet detail')
        Logger(verbose=True).debug('loud detail')

        out = capsys.readouterr().out
        assert 'quiet detail' not in out
        assert 'loud detail' in out

    def test_json_buffer(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test JSON mode buffers records until flushed."""
        log = Logger(json_output=True)

        log.info('first')
        log.error('second')
        assert capsys.readouterr().out == ''

        log.flush_json()

        records = json.loads(capsys.readouterr().out)
        assert records == [
            {'level': 'info', 'message': 'first'},
            {'level': 'error', 'message': 'second'},
        ]

    def test_ci_annotations(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test workflow commands are printed under CI."""
        log = Logger(ci=True)

        log.group('Run')
        log.endgroup()
        log.notice('Lintic Success', 'done')
        log.annotate_error('Lintic Error', 'broken')

        assert capsys.readouterr().out.splitlines() == [
            '::group::Run',
            '::endgroup::',
            '::notice title=Lintic Success::done',
            '::error title=Lintic Error::broken',
        ]

    def test_annotations_outside_ci(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test annotations fall back to log lines outside CI."""
        log = Logger()

        log.annotate_error('Lintic Error', 'broken')

        out = capsys.readouterr().out
        assert '::error' not in out
        assert 'Lintic Error: broken' in out


class TestIsCi:
    """Tests for CI detection."""

    def test_github_actions(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test GitHub Actions is detected."""
        monkeypatch.setenv('GITHUB_ACTIONS', 'true')
        assert is_ci()

    def test_local(self) -> None:
        """Test a plain shell is not CI."""
        assert not is_ci()
