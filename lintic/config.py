"""Configuration loading for Lintic.

Configuration is assembled once at start-up from, in increasing order of
precedence: built-in defaults, an optional config file, the environment
(including a ``.env`` file), and command line flags. The result is a frozen
``LinticConfig`` that is passed explicitly to every component.

Config file (``.linticrc.yaml``, ``.linticrc.yml`` or ``.linticrc.json``)::

    github:
      api_url: https://api.github.com
      timeout: 30
    model:
      name: qwen2.5-coder:7b
      uri: http://localhost:11434/v1/
      timeout: 120
    linter:
      command: bundle exec rubocop
      extensions: [.rb, .rake, .gemspec, .ru]
      timeout: 120
    publish:
      branch_prefix: lintic/

Environment variables:
    LINTIC_GITHUB_TOKEN      GitHub token (required)
    LINTIC_GITHUB_REPO       Repository as owner/name (required)
    LINTIC_GITHUB_PR_NUMBER  Pull request number (required)
    LINTIC_GITHUB_API_URL    GitHub API base URL
    LINTIC_OLLAMA_MODEL      Model name (alias: LINTIC_MODEL)
    LINTIC_OLLAMA_URI        OpenAI-compatible endpoint (alias: LINTIC_URI)
    LINTIC_OPENAI_API_KEY    API key for the endpoint
    LINTIC_BRANCH_PREFIX     Prefix for fix branches
    LINTIC_RUBOCOP           RuboCop command
"""
from __future__ import annotations

import json
import os
import re
import shlex
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any
from typing import cast
from typing import TypedDict

import yaml
from dotenv import load_dotenv

from lintic.errors import ConfigurationError
from lintic.output import logger

# Default configuration file names
CONFIG_FILE_NAMES = [
    '.linticrc.yaml',
    '.linticrc.yml',
    '.linticrc.json',
]

# Local, free inference backend by default
DEFAULT_MODEL = 'codellama'
DEFAULT_MODEL_URI = 'http://localhost:11434/v1/'
DEFAULT_API_KEY = 'ollama'
DEFAULT_GITHUB_API_URL = 'https://api.github.com'
DEFAULT_BRANCH_PREFIX = 'lintic/'
DEFAULT_EXTENSIONS = ['.rb', '.rake', '.gemspec', '.ru']

REQUIRED_ENV_VARS = {
    'token': 'LINTIC_GITHUB_TOKEN',
    'repo': 'LINTIC_GITHUB_REPO',
    'pr_number': 'LINTIC_GITHUB_PR_NUMBER',
}

REPO_PATTERN = re.compile(r'^[\w.-]+/[\w.-]+$')


# =============================================================================
# TypedDict Configuration Schemas
# =============================================================================


class GitHubConfigDict(TypedDict, total=False):
    """GitHub access settings."""
    token: str
    repo: str
    pr_number: int | str
    api_url: str
    timeout: int


class ModelConfigDict(TypedDict, total=False):
    """Language model settings."""
    name: str
    uri: str
    api_key: str
    timeout: int
    temperature: float
    max_tokens: int
    summary_max_tokens: int


class LinterConfigDict(TypedDict, total=False):
    """RuboCop settings."""
    command: str | list[str]
    args: list[str]
    extensions: list[str]
    timeout: int


class PublishConfigDict(TypedDict, total=False):
    """Fix branch and pull request settings."""
    branch_prefix: str


class LinticConfigDict(TypedDict, total=False):
    """Root configuration schema."""
    github: GitHubConfigDict
    model: ModelConfigDict
    linter: LinterConfigDict
    publish: PublishConfigDict


# =============================================================================
# Runtime Configuration
# =============================================================================


def _parse_pr_number(value: int | str | None) -> int | None:
    """Parse a pull request number, rejecting anything but a positive integer."""
    if value is None or value == '':
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f'Invalid pull request number: {value!r}') from None
    if number <= 0:
        raise ConfigurationError(f'Invalid pull request number: {value!r}')
    return number


@dataclass(frozen=True)
class GitHubConfig:
    """Runtime GitHub configuration."""
    token: str = ''
    repo: str = ''
    pr_number: int | None = None
    api_url: str = DEFAULT_GITHUB_API_URL
    timeout: int = 30

    @classmethod
    def from_dict(cls, data: GitHubConfigDict) -> GitHubConfig:
        """Create from dictionary."""
        return cls(
            token=data.get('token', ''),
            repo=data.get('repo', ''),
            pr_number=_parse_pr_number(data.get('pr_number')),
            api_url=data.get('api_url', DEFAULT_GITHUB_API_URL).rstrip('/'),
            timeout=data.get('timeout', 30),
        )


@dataclass(frozen=True)
class ModelConfig:
    """Runtime language model configuration."""
    name: str = DEFAULT_MODEL
    uri: str = DEFAULT_MODEL_URI
    api_key: str = DEFAULT_API_KEY
    timeout: int = 120
    temperature: float = 0.1
    max_tokens: int = 4000
    summary_max_tokens: int = 1000

    @classmethod
    def from_dict(cls, data: ModelConfigDict) -> ModelConfig:
        """Create from dictionary."""
        return cls(
            name=data.get('name', DEFAULT_MODEL),
            uri=data.get('uri', DEFAULT_MODEL_URI),
            api_key=data.get('api_key', DEFAULT_API_KEY),
            timeout=data.get('timeout', 120),
            temperature=data.get('temperature', 0.1),
            max_tokens=data.get('max_tokens', 4000),
            summary_max_tokens=data.get('summary_max_tokens', 1000),
        )


@dataclass(frozen=True)
class LinterConfig:
    """Runtime RuboCop configuration."""
    command: tuple[str, ...] = ('rubocop',)
    args: tuple[str, ...] = ()
    extensions: tuple[str, ...] = tuple(DEFAULT_EXTENSIONS)
    timeout: int = 120

    @classmethod
    def from_dict(cls, data: LinterConfigDict) -> LinterConfig:
        """Create from dictionary."""
        command = data.get('command', 'rubocop')
        if isinstance(command, str):
            command = shlex.split(command)
        return cls(
            command=tuple(command),
            args=tuple(data.get('args', [])),
            extensions=tuple(data.get('extensions', DEFAULT_EXTENSIONS)),
            timeout=data.get('timeout', 120),
        )


@dataclass(frozen=True)
class PublishConfig:
    """Runtime fix publishing configuration."""
    branch_prefix: str = DEFAULT_BRANCH_PREFIX

    @classmethod
    def from_dict(cls, data: PublishConfigDict) -> PublishConfig:
        """Create from dictionary."""
        return cls(branch_prefix=data.get('branch_prefix', DEFAULT_BRANCH_PREFIX))


@dataclass(frozen=True)
class LinticConfig:
    """Complete runtime configuration."""
    github: GitHubConfig = field(default_factory=GitHubConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    linter: LinterConfig = field(default_factory=LinterConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)

    @classmethod
    def from_dict(cls, data: LinticConfigDict) -> LinticConfig:
        """Create from dictionary with defaults."""
        return cls(
            github=GitHubConfig.from_dict(data.get('github', {})),
            model=ModelConfig.from_dict(data.get('model', {})),
            linter=LinterConfig.from_dict(data.get('linter', {})),
            publish=PublishConfig.from_dict(data.get('publish', {})),
        )

    def validate(self) -> LinticConfig:
        """Check required settings, raising ConfigurationError when unusable."""
        missing = [
            env_var for attr, env_var in REQUIRED_ENV_VARS.items()
            if not getattr(self.github, attr)
        ]
        if missing:
            raise ConfigurationError(
                f'Missing required environment variables: {", ".join(missing)}',
            )
        if not REPO_PATTERN.match(self.github.repo):
            raise ConfigurationError(
                f'Invalid repository {self.github.repo!r}, expected owner/name',
            )
        return self


# =============================================================================
# Loading
# =============================================================================


def load_config_file(config_path: Path | None = None) -> LinticConfigDict:
    """Load configuration from a YAML or JSON file."""
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(f'Config file not found: {config_path}')
        paths = [config_path]
    else:
        paths = [Path(name) for name in CONFIG_FILE_NAMES]

    for path in paths:
        if path.exists():
            logger.debug(f'Loading config from {path}')
            try:
                with open(path, encoding='utf-8') as f:
                    if path.suffix in ('.yaml', '.yml'):
                        data = yaml.safe_load(f) or {}
                    else:
                        data = json.load(f)
            except (yaml.YAMLError, json.JSONDecodeError) as e:
                raise ConfigurationError(f'Invalid config file {path}: {e}') from e
            if not isinstance(data, dict):
                raise ConfigurationError(f'Invalid config file {path}: expected a mapping')
            return cast(LinticConfigDict, data)

    return {}


# (section, key, environment variables in order of preference)
ENV_VARS: list[tuple[str, str, tuple[str, ...]]] = [
    ('github', 'token', ('LINTIC_GITHUB_TOKEN',)),
    ('github', 'repo', ('LINTIC_GITHUB_REPO',)),
    ('github', 'pr_number', ('LINTIC_GITHUB_PR_NUMBER',)),
    ('github', 'api_url', ('LINTIC_GITHUB_API_URL',)),
    ('model', 'name', ('LINTIC_OLLAMA_MODEL', 'LINTIC_MODEL')),
    ('model', 'uri', ('LINTIC_OLLAMA_URI', 'LINTIC_URI')),
    ('model', 'api_key', ('LINTIC_OPENAI_API_KEY',)),
    ('linter', 'command', ('LINTIC_RUBOCOP',)),
    ('publish', 'branch_prefix', ('LINTIC_BRANCH_PREFIX',)),
]


def _first_env(names: tuple[str, ...]) -> str | None:
    """Return the first non-empty environment variable among names."""
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def load_env_config(dotenv_path: Path | None = None) -> LinticConfigDict:
    """Load configuration from environment variables and a .env file."""
    # Variables already set in the environment win over .env
    load_dotenv(dotenv_path=dotenv_path or Path.cwd() / '.env', override=False)

    config: dict[str, dict[str, Any]] = {}
    for section, key, names in ENV_VARS:
        value = _first_env(names)
        if value is not None:
            config.setdefault(section, {})[key] = value
    return cast(LinticConfigDict, config)


def merge_configs(*configs: LinticConfigDict) -> LinticConfigDict:
    """Merge configurations section by section, later ones override earlier."""
    result: dict[str, dict[str, Any]] = {}
    for config in configs:
        for section, values in config.items():
            result.setdefault(section, {}).update(values)  # type: ignore[arg-type]
    return cast(LinticConfigDict, result)
