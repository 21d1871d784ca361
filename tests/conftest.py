"""Shared test fixtures for callbackhub.

Provides a stand-in controller object, isolated config environments,
output state management, and a CLI runner. These fixtures are discovered by
pytest automatically and available to all test modules.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest

from callbackhub.output import OutputFormat, OutputManager, reset_output, set_output


REPO_ROOT = Path(__file__).parent.parent
EXAMPLE_PLUGINS_DIR = REPO_ROOT / "plugins"


class FakeController:
    """Minimal mutable controller: callbacks record calls into ``calls``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []
        self.helpers: list[str] = []


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager and the package logger after every test.

    The manager keeps references to sys.stdout/sys.stderr from when it was
    created, and the CLI attaches a stderr log handler; CliRunner swaps
    those streams per invocation.
    """
    yield
    reset_output()
    logger = logging.getLogger("callbackhub")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Controller fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def controller() -> FakeController:
    """A fresh stand-in controller."""
    return FakeController()


@pytest.fixture
def example_plugins_dir() -> Path:
    """The repository's example plugin directory."""
    return EXAMPLE_PLUGINS_DIR


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME below tmp_path, clears all
    CALLBACKHUB_* variables, forces the XDG code path, and changes the
    working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("callbackhub.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "CALLBACKHUB_PRIORITY",
        "CALLBACKHUB_PLUGINS",
        "CALLBACKHUB_PLUGINS_DIR",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
