"""Error taxonomy shared by every Lintic component."""
from __future__ import annotations


class LinticError(Exception):
    """Base class for all errors raised by Lintic."""


class ConfigurationError(LinticError):
    """Missing or malformed required configuration."""


class GitHubError(LinticError):
    """Any failure while talking to the GitHub API."""


class LintingError(LinticError):
    """RuboCop could not be run or its output could not be parsed."""


class AIError(LinticError):
    """The language model returned nothing usable."""
