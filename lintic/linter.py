"""Running RuboCop over file content and normalizing its offenses."""
from __future__ import annotations

import json
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Any

from lintic.config import LinterConfig
from lintic.errors import LintingError
from lintic.models import Offense
from lintic.output import logger

# RuboCop exits 0 when clean and 1 when offenses were found
RUBOCOP_OK_EXIT_CODES = (0, 1)

LINT_FILE_NAME = 'lintic_check.rb'


def empty_report() -> dict[str, Any]:
    """Report used when RuboCop prints nothing, meaning nothing to fix."""
    return {'files': [{'offenses': []}]}


class LintWorkspace:
    """Context manager holding file content in a private temporary directory.

    The directory and the file inside it are removed on exit, whether the
    block completed or raised.
    """

    def __init__(self, content: str, filename: str = LINT_FILE_NAME) -> None:
        self.content = content
        self.filename = filename
        self.directory: Path | None = None
        self.path: Path | None = None

    def __enter__(self) -> Path:
        self.directory = Path(tempfile.mkdtemp(prefix='lintic_'))
        path = self.directory / self.filename
        try:
            path.write_text(self.content, encoding='utf-8')
        except OSError:
            shutil.rmtree(self.directory, ignore_errors=True)
            raise
        self.path = path
        return path

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.directory is not None:
            shutil.rmtree(self.directory, ignore_errors=True)
        self.directory = None
        self.path = None
        return None


class RubocopRunner:
    """Runs RuboCop in JSON mode against a single file's content."""

    def __init__(self, config: LinterConfig) -> None:
        self.config = config

    def get_command(self, path: Path) -> list[str]:
        """Get command to run RuboCop on path."""
        return [
            *self.config.command,
            '--format', 'json',
            '--force-exclusion',
            *self.config.args,
            str(path),
        ]

    def run(self, content: str) -> dict[str, Any]:
        """Lint content and return RuboCop's parsed JSON report.

        Output of the subprocess is captured in full, so nothing RuboCop
        prints reaches Lintic's own stdout or stderr.
        """
        try:
            with LintWorkspace(content) as path:
                cmd = self.get_command(path)
                logger.debug(f'Running: {" ".join(cmd)}')
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.config.timeout,
                )
        except FileNotFoundError as e:
            raise LintingError(f'RuboCop not found: {self.config.command[0]}') from e
        except subprocess.TimeoutExpired as e:
            raise LintingError(f'RuboCop timed out after {self.config.timeout}s') from e
        except OSError as e:
            raise LintingError(f'Linting check failed: {e}') from e

        output = result.stdout or ''
        if not output.strip():
            if result.returncode not in RUBOCOP_OK_EXIT_CODES:
                detail = (result.stderr or '').strip().splitlines()
                reason = detail[-1] if detail else f'exit status {result.returncode}'
                raise LintingError(f'Linting check failed: {reason}')
            return empty_report()

        try:
            report = json.loads(output)
        except json.JSONDecodeError as e:
            logger.error(f'Failed to parse RuboCop output: {e}')
            raise LintingError('RuboCop output parsing failed') from e

        if not isinstance(report, dict):
            raise LintingError('RuboCop output parsing failed')
        return report


def _parse_line(location: Any) -> int | None:
    """Read the line number from an offense location, if there is one."""
    if not isinstance(location, dict):
        return None
    line = location.get('line', location.get('start_line'))
    if isinstance(line, bool):
        return None
    if isinstance(line, int):
        return line
    if isinstance(line, str) and line.isdigit():
        return int(line)
    return None


def _parse_offense(item: dict[str, Any]) -> Offense:
    """Convert one RuboCop offense entry into an Offense."""
    return Offense(
        line=_parse_line(item.get('location')),
        message=str(item.get('message') or '').strip() or '(no message)',
        rule_id=str(item.get('cop_name') or '').strip() or 'Unknown',
    )


def extract_offenses(report: Any) -> list[Offense]:
    """Flatten a RuboCop report into offenses, in RuboCop's order.

    Never raises: missing ``files`` or ``offenses`` keys, or entries of the
    wrong shape, simply contribute nothing.
    """
    if not isinstance(report, dict):
        return []
    files = report.get('files')
    if not isinstance(files, list):
        return []

    offenses: list[Offense] = []
    for file_entry in files:
        if not isinstance(file_entry, dict):
            continue
        items = file_entry.get('offenses')
        if not isinstance(items, list):
            continue
        offenses.extend(_parse_offense(item) for item in items if isinstance(item, dict))
    return offenses


def has_offenses(report: Any) -> bool:
    """Check whether a RuboCop report contains at least one offense."""
    return bool(extract_offenses(report))
