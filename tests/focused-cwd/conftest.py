"""Pytest configuration and fixtures for focused-cwd tests."""

import logging

import pytest
from pathlib import Path
from typing import Generator, List

from fixtures.fake_proc import FakeProc
from focused_cwd.proc_table import ProcTable


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """Empty imitation /proc under tmp_path.

    Returns:
        FakeProc builder rooted at tmp_path/proc.
    """
    return FakeProc(tmp_path / "proc")


@pytest.fixture
def proc_table(fake_proc: FakeProc) -> Generator[ProcTable, None, None]:
    """ProcTable opened on the imitation /proc.

    Yields:
        Open ProcTable, closed after the test.
    """
    with ProcTable(fake_proc.root) as proc:
        yield proc


@pytest.fixture
def dirs(tmp_path: Path):
    """Factory creating real directories to serve as working directories.

    Returns:
        Callable taking a name and returning the absolute path as a string.
    """
    def make(name: str) -> str:
        path = tmp_path / "fs" / name
        path.mkdir(parents=True, exist_ok=True)
        return str(path)

    return make


@pytest.fixture
def event_log() -> List[str]:
    """Shared request log for ordering assertions."""
    return []


@pytest.fixture(autouse=True)
def restore_package_logger() -> Generator[None, None, None]:
    """Undo configure_logging() calls made by CLI tests."""
    logger = logging.getLogger("focused_cwd")
    level = logger.level
    handlers = list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers
