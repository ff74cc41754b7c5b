"""Shared pytest fixtures for container_version_manager tests."""

from __future__ import annotations

import os

import pytest
import typer
from typer.testing import CliRunner

from container_version_manager.cli.main import app


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables for each test."""
    # Clear any CVM_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("CVM_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app
