"""Terminal output for Lintic: colours, the shared logger and CI annotations."""
from __future__ import annotations

import json
import os
from typing import Any


def is_ci() -> bool:
    """Return True when running under a CI system such as GitHub Actions."""
    return os.environ.get('CI') == 'true' or os.environ.get('GITHUB_ACTIONS') == 'true'


class Colors:
    """ANSI color codes for terminal output."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'

    @staticmethod
    def disable() -> None:
        """Disable colors for non-TTY output."""
        Colors.RESET = ''
        Colors.BOLD = ''
        Colors.DIM = ''
        Colors.RED = ''
        Colors.GREEN = ''
        Colors.YELLOW = ''
        Colors.BLUE = ''


class Logger:
    """Structured logger with verbosity levels, JSON output and CI annotations."""

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        json_output: bool = False,
        ci: bool = False,
    ) -> None:
        self.verbose = verbose
        self.quiet = quiet
        self.json_output = json_output
        self.ci = ci
        self._json_buffer: list[dict[str, Any]] = []

    def _print(self, message: str, force: bool = False) -> None:
        """Print message unless quiet mode is enabled."""
        if not self.quiet or force:
            print(message)

    def _record(self, level: str, message: str) -> None:
        self._json_buffer.append({'level': level, 'message': message})

    def info(self, message: str) -> None:
        """Print info message."""
        if self.json_output:
            self._record('info', message)
        else:
            self._print(f'{Colors.BLUE}ℹ{Colors.RESET} {message}')

    def success(self, message: str) -> None:
        """Print success message."""
        if self.json_output:
            self._record('success', message)
        else:
            self._print(f'{Colors.GREEN}✓{Colors.RESET} {message}')

    def warning(self, message: str) -> None:
        """Print warning message."""
        if self.json_output:
            self._record('warning', message)
        else:
            self._print(f'{Colors.YELLOW}⚠{Colors.RESET} {message}')

    def error(self, message: str) -> None:
        """Print error message."""
        if self.json_output:
            self._record('error', message)
        else:
            self._print(f'{Colors.RED}✗{Colors.RESET} {message}', force=True)

    def debug(self, message: str) -> None:
        """Print debug message (only in verbose mode)."""
        if self.verbose:
            if self.json_output:
                self._record('debug', message)
            else:
                self._print(f'{Colors.DIM}  {message}{Colors.RESET}')

    def header(self, message: str) -> None:
        """Print header message."""
        if self.json_output:
            self._record('header', message)
        else:
            self._print(f'\n{Colors.BOLD}{message}{Colors.RESET}')

    # CI workflow commands. Outside CI they degrade to ordinary log lines.

    def group(self, title: str) -> None:
        """Open a collapsible log group."""
        if self.ci and not self.json_output:
            print(f'::group::{title}')
        else:
            self.header(title)

    def endgroup(self) -> None:
        """Close the current log group."""
        if self.ci and not self.json_output:
            print('::endgroup::')

    def notice(self, title: str, message: str) -> None:
        """Emit a notice annotation."""
        if self.ci and not self.json_output:
            print(f'::notice title={title}::{message}')
        else:
            self.success(message)

    def annotate_error(self, title: str, message: str) -> None:
        """Emit an error annotation."""
        if self.ci and not self.json_output:
            print(f'::error title={title}::{message}')
        else:
            self.error(f'{title}: {message}')

    def flush_json(self) -> None:
        """Flush JSON buffer to stdout."""
        if self.json_output and self._json_buffer:
            print(json.dumps(self._json_buffer, indent=2))
            self._json_buffer = []


# Shared logger instance, reconfigured in place by the CLI
logger = Logger()


def configure_logger(
    verbose: bool = False,
    quiet: bool = False,
    json_output: bool = False,
    ci: bool | None = None,
) -> Logger:
    """Reconfigure the shared logger and return it."""
    logger.verbose = verbose
    logger.quiet = quiet
    logger.json_output = json_output
    logger.ci = is_ci() if ci is None else ci
    return logger
