"""Tests for applying sync actions to project directories."""

import pytest

from sync_rules.core.executor import SyncExecutor
from sync_rules.core.models import FileInfo, SyncAction, SyncActionType
from sync_rules.core.path_guard import PathGuard
from sync_rules.core.scanner import scan

RULES = [".clinerules"]


@pytest.fixture
def projects(make_project):
    source = make_project("source", {".clinerules/a.md": "newest", ".clinerules/deep/b.md": "bee"})
    target = make_project("target", {".clinerules/a.md": "stale", ".clinerules/old.md": "gone soon"})
    return source, target


def file_info(project, relative_path):
    return scan(project.path, RULES)[relative_path]


def add(source, target, relative_path):
    return SyncAction(
        type=SyncActionType.ADD,
        target_project=target.name,
        source_project=source.name,
        relative_path=relative_path,
        source_file=file_info(source, relative_path),
    )


def update(source, target, relative_path):
    return SyncAction(
        type=SyncActionType.UPDATE,
        target_project=target.name,
        source_project=source.name,
        relative_path=relative_path,
        source_file=file_info(source, relative_path),
        target_file=file_info(target, relative_path),
    )


def delete(target, relative_path):
    return SyncAction(
        type=SyncActionType.DELETE,
        target_project=target.name,
        relative_path=relative_path,
        target_file=file_info(target, relative_path),
    )


def test_add_update_and_delete(projects):
    source, target = projects
    actions = [
        add(source, target, ".clinerules/deep/b.md"),
        update(source, target, ".clinerules/a.md"),
        delete(target, ".clinerules/old.md"),
    ]

    summary = SyncExecutor([source, target]).execute(actions)

    assert (summary.additions, summary.updates, summary.deletions, summary.conflicts) == (1, 1, 1, 0)
    assert (target.path / ".clinerules/deep/b.md").read_text() == "bee"
    assert (target.path / ".clinerules/a.md").read_text() == "newest"
    assert not (target.path / ".clinerules/old.md").exists()


def test_added_file_rescans_with_source_hash(projects):
    source, target = projects
    action = add(source, target, ".clinerules/deep/b.md")

    SyncExecutor([source, target]).execute([action])

    assert file_info(target, ".clinerules/deep/b.md").hash == action.source_file.hash


def test_dry_run_counts_without_touching_disk(projects):
    source, target = projects
    actions = [
        add(source, target, ".clinerules/deep/b.md"),
        update(source, target, ".clinerules/a.md"),
        delete(target, ".clinerules/old.md"),
    ]

    summary = SyncExecutor([source, target], dry_run=True).execute(actions)

    assert (summary.additions, summary.updates, summary.deletions) == (1, 1, 1)
    assert not (target.path / ".clinerules/deep").exists()
    assert (target.path / ".clinerules/a.md").read_text() == "stale"
    assert (target.path / ".clinerules/old.md").exists()


def test_failed_action_is_counted_and_the_rest_still_run(projects):
    source, target = projects
    broken = SyncAction(
        type=SyncActionType.ADD,
        target_project=target.name,
        source_project=source.name,
        relative_path=".clinerules/vanished.md",
        source_file=FileInfo(relative_path=".clinerules/vanished.md", absolute_path=source.path / ".clinerules/vanished.md"),
    )

    summary = SyncExecutor([source, target]).execute([broken, add(source, target, ".clinerules/deep/b.md")])

    assert summary.conflicts == 1
    assert summary.additions == 1
    assert (target.path / ".clinerules/deep/b.md").exists()


def test_paths_outside_the_project_are_refused(projects, temp_dir):
    source, target = projects
    escape = SyncAction(
        type=SyncActionType.ADD,
        target_project=target.name,
        source_project=source.name,
        relative_path="../escaped.md",
        source_file=file_info(source, ".clinerules/a.md"),
    )

    summary = SyncExecutor([source, target], PathGuard([target.path])).execute([escape])

    assert summary.conflicts == 1
    assert not (temp_dir / "escaped.md").exists()


def test_paths_into_another_project_are_refused(projects):
    source, target = projects
    crossing = SyncAction(
        type=SyncActionType.ADD,
        target_project=target.name,
        source_project=source.name,
        relative_path=f"../{source.name}/injected.md",
        source_file=file_info(source, ".clinerules/a.md"),
    )

    summary = SyncExecutor([source, target]).execute([crossing])

    assert (summary.additions, summary.conflicts) == (0, 1)
    assert not (source.path / "injected.md").exists()


def test_unknown_target_project_is_a_conflict(projects):
    source, target = projects
    action = add(source, target, ".clinerules/deep/b.md").model_copy(update={"target_project": "elsewhere"})

    summary = SyncExecutor([source, target]).execute([action])

    assert summary.conflicts == 1


def test_actions_are_grouped_by_directory(projects):
    source, target = projects
    executor = SyncExecutor([source, target])
    actions = [
        add(source, target, ".clinerules/deep/b.md"),
        update(source, target, ".clinerules/a.md"),
        delete(target, ".clinerules/old.md"),
    ]

    groups = executor.group_by_directory(actions)

    assert [directory.name for directory, _ in groups] == [".clinerules", "deep"]
    assert [action.type for action in groups[0][1]] == [SyncActionType.UPDATE, SyncActionType.DELETE]
