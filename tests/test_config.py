"""Tests for lintic.config."""
from __future__ import annotations

import json
import os
from pathlib import Path
from unittest import mock

import pytest

from lintic.config import DEFAULT_MODEL
from lintic.config import DEFAULT_MODEL_URI
from lintic.config import LinterConfig
from lintic.config import LinticConfig
from lintic.config import load_config_file
from lintic.config import load_env_config
from lintic.config import merge_configs
from lintic.errors import ConfigurationError


def valid_config(**github: object) -> LinticConfig:
    data = {'token': 't0k3n', 'repo': 'octo/widgets', 'pr_number': '7'}
    data.update(github)  # type: ignore[arg-type]
    return LinticConfig.from_dict({'github': data})  # type: ignore[typeddict-item]


class TestLinticConfig:
    """Tests for LinticConfig construction and validation."""

    def test_defaults_favor_local_backend(self) -> None:
        """Test that the model defaults point at a local Ollama server."""
        config = LinticConfig()

        assert config.model.name == DEFAULT_MODEL
        assert config.model.uri == DEFAULT_MODEL_URI
        assert config.model.api_key == 'ollama'
        assert config.model.temperature == 0.1
        assert config.model.max_tokens > config.model.summary_max_tokens

    def test_pr_number_parsed(self) -> None:
        """Test PR numbers given as strings become integers."""
        assert valid_config().github.pr_number == 7

    def test_invalid_pr_number(self) -> None:
        """Test non-numeric PR numbers are rejected."""
        with pytest.raises(ConfigurationError, match='pull request number'):
            valid_config(pr_number='seven')

    def test_negative_pr_number(self) -> None:
        """Test zero or negative PR numbers are rejected."""
        with pytest.raises(ConfigurationError):
            valid_config(pr_number='0')

    def test_validate_lists_all_missing(self) -> None:
        """Test every missing required variable is reported at once."""
        with pytest.raises(ConfigurationError) as exc_info:
            LinticConfig().validate()

        message = str(exc_info.value)
        assert 'LINTIC_GITHUB_TOKEN' in message
        assert 'LINTIC_GITHUB_REPO' in message
        assert 'LINTIC_GITHUB_PR_NUMBER' in message

    def test_validate_repo_format(self) -> None:
        """Test repositories must look like owner/name."""
        with pytest.raises(ConfigurationError, match='owner/name'):
            valid_config(repo='widgets').validate()

    def test_validate_returns_config(self) -> None:
        """Test validate returns the config for chaining."""
        config = valid_config()
        assert config.validate() is config

    def test_config_is_frozen(self) -> None:
        """Test configuration cannot be changed after construction."""
        config = valid_config()
        with pytest.raises(AttributeError):
            config.github.token = 'other'  # type: ignore[misc]

    def test_linter_command_string_split(self) -> None:
        """Test a RuboCop command given as a string is split into arguments."""
        config = LinterConfig.from_dict({'command': 'bundle exec rubocop'})
        assert config.command == ('bundle', 'exec', 'rubocop')


class TestLoadConfigFile:
    """Tests for config file loading."""

    def test_no_file(self) -> None:
        """Test an empty config when no file exists."""
        assert load_config_file() == {}

    def test_yaml_file(self, tmp_path: Path) -> None:
        """Test the default YAML file is picked up."""
        (tmp_path / '.linticrc.yaml').write_text(
            'model:\n  name: qwen2.5-coder:7b\npublish:\n  branch_prefix: bots/\n',
        )

        data = load_config_file()

        assert data['model']['name'] == 'qwen2.5-coder:7b'
        assert data['publish']['branch_prefix'] == 'bots/'

    def test_json_file(self, tmp_path: Path) -> None:
        """Test an explicit JSON config file."""
        path = tmp_path / 'custom.json'
        path.write_text(json.dumps({'linter': {'timeout': 30}}))

        assert load_config_file(path) == {'linter': {'timeout': 30}}

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """Test an explicit path that does not exist is an error."""
        with pytest.raises(ConfigurationError, match='not found'):
            load_config_file(tmp_path / 'nope.yaml')

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test malformed YAML is a configuration error."""
        (tmp_path / '.linticrc.yaml').write_text('model: [unclosed\n')

        with pytest.raises(ConfigurationError):
            load_config_file()

    def test_non_mapping(self, tmp_path: Path) -> None:
        """Test a config file must hold a mapping."""
        (tmp_path / '.linticrc.yaml').write_text('- just\n- a list\n')

        with pytest.raises(ConfigurationError, match='mapping'):
            load_config_file()


class TestLoadEnvConfig:
    """Tests for environment configuration."""

    def test_required_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the GitHub variables are read."""
        monkeypatch.setenv('LINTIC_GITHUB_TOKEN', 'secret')
        monkeypatch.setenv('LINTIC_GITHUB_REPO', 'octo/widgets')
        monkeypatch.setenv('LINTIC_GITHUB_PR_NUMBER', '12')

        config = load_env_config()

        assert config['github'] == {
            'token': 'secret', 'repo': 'octo/widgets', 'pr_number': '12',
        }

    def test_model_aliases(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the short variable names used by the action are honored."""
        monkeypatch.setenv('LINTIC_MODEL', 'llama3.2:3b')
        monkeypatch.setenv('LINTIC_URI', 'http://ollama:11434/v1/')

        config = load_env_config()

        assert config['model']['name'] == 'llama3.2:3b'
        assert config['model']['uri'] == 'http://ollama:11434/v1/'

    def test_long_name_wins_over_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test LINTIC_OLLAMA_MODEL takes precedence over LINTIC_MODEL."""
        monkeypatch.setenv('LINTIC_OLLAMA_MODEL', 'codellama:13b')
        monkeypatch.setenv('LINTIC_MODEL', 'llama3.2:3b')

        assert load_env_config()['model']['name'] == 'codellama:13b'

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values from .env are used when the environment lacks them."""
        monkeypatch.setenv('LINTIC_GITHUB_REPO', 'octo/widgets')
        monkeypatch.setenv('LINTIC_BRANCH_PREFIX', 'bots/')
        (tmp_path / '.env').write_text(
            'LINTIC_GITHUB_REPO=octo/from-dotenv\nLINTIC_GITHUB_PR_NUMBER=3\n',
        )

        # load_dotenv writes to os.environ directly
        with mock.patch.dict(os.environ):
            config = load_env_config()

        assert config['github']['repo'] == 'octo/widgets'
        assert config['github']['pr_number'] == '3'
        assert config['publish']['branch_prefix'] == 'bots/'

    def test_empty_environment(self) -> None:
        """Test nothing is set when no variables exist."""
        assert load_env_config() == {}


class TestMergeConfigs:
    """Tests for merge_configs."""

    def test_later_overrides_per_key(self) -> None:
        """Test sections merge key by key."""
        merged = merge_configs(
            {'model': {'name': 'a', 'timeout': 30}},
            {'model': {'name': 'b'}, 'github': {'repo': 'x/y'}},
        )

        assert merged == {
            'model': {'name': 'b', 'timeout': 30},
            'github': {'repo': 'x/y'},
        }
