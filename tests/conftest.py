"""Test configuration for pytest."""
from __future__ import annotations

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from lintic.output import configure_logger


@pytest.fixture(autouse=True)
def change_to_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, Any, None]:
    """Change to temporary directory for each test."""
    original_dir = os.getcwd()
    monkeypatch.chdir(tmp_path)
    yield
    os.chdir(original_dir)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove Lintic and CI variables so the host environment cannot leak in."""
    for name in list(os.environ):
        if name.startswith('LINTIC_') or name.startswith('GITHUB_') or name == 'CI':
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logger() -> Generator[None, Any, None]:
    """Restore the shared logger after tests that reconfigure it."""
    yield
    configure_logger(ci=False)


