"""
Test Configuration and Fixtures
===============================

Shared fixtures for building throwaway project trees.
"""

import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sync_rules.core.models import FileInfo, FileVersion, GlobalFileState, ProjectInfo

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def set_mtime(path: Path, offset_seconds: float) -> None:
    """Pin a file's modification time relative to BASE_TIME."""
    stamp = (BASE_TIME + timedelta(seconds=offset_seconds)).timestamp()
    os.utime(path, (stamp, stamp))


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Workspace directory holding all test projects."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def make_project(temp_dir: Path) -> Callable[..., ProjectInfo]:
    """
    Factory creating a project directory with the given files.

    Files map relative paths to text content. An optional mtimes mapping
    pins modification times as second offsets from BASE_TIME.
    """

    def _make(name: str, files: dict[str, str] | None = None, mtimes: dict[str, float] | None = None) -> ProjectInfo:
        root = temp_dir / name
        root.mkdir(parents=True, exist_ok=True)
        for relative_path, content in (files or {}).items():
            file_path = root / relative_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(content)
        for relative_path, offset in (mtimes or {}).items():
            set_mtime(root / relative_path, offset)
        return ProjectInfo(name=name, path=root)

    return _make


class FakePrompter:
    """Prompter answering from a script of option indexes and confirmations."""

    def __init__(self, choices: list[int] | None = None, confirmations: list[bool] | None = None):
        self.choices = list(choices or [])
        self.confirmations = list(confirmations or [])
        self.questions: list[tuple[str, list[str]]] = []

    def select(self, question, options):
        self.questions.append((question, [label for label, _ in options]))
        index = self.choices.pop(0) if self.choices else 0
        return options[index][1]

    def confirm(self, question):
        self.questions.append((question, []))
        return self.confirmations.pop(0) if self.confirmations else True


@pytest.fixture
def fake_prompter() -> Callable[..., FakePrompter]:
    return FakePrompter


@pytest.fixture
def pin_mtime() -> Callable[[Path, float], None]:
    return set_mtime


def make_state(relative_path: str, versions: dict[str, tuple[str | None, float]], missing: tuple[str, ...] = ()) -> GlobalFileState:
    """Build a file state from ``{project: (hash, mtime offset)}`` without touching disk."""
    return GlobalFileState(
        relative_path=relative_path,
        versions={
            name: FileVersion(
                project_name=name,
                file_info=FileInfo(
                    relative_path=relative_path,
                    absolute_path=Path("/projects") / name / relative_path,
                    hash=digest,
                ),
                last_modified=BASE_TIME + timedelta(seconds=offset),
            )
            for name, (digest, offset) in versions.items()
        },
        missing_from=missing,
    )


@pytest.fixture
def state_factory() -> Callable[..., GlobalFileState]:
    return make_state
