"""End-to-end tests for multi-project synchronization."""

import pytest

from sync_rules.core.models import ProjectInfo
from sync_rules.core.scanner import scan_all_projects
from sync_rules.core.state_builder import build_global_file_states
from sync_rules.errors import NoProjectsScannedError
from sync_rules.sync.multi_sync import MultiSyncOptions, plan_sync, run_multi_sync

RULE = ".clinerules/a.md"


def snapshot(*projects):
    return {
        (project.name, path.relative_to(project.path).as_posix()): path.read_bytes()
        for project in projects
        for path in project.path.rglob("*")
        if path.is_file()
    }


@pytest.fixture
def three_projects(make_project):
    p1 = make_project("P1", {RULE: "old"}, mtimes={RULE: 0})
    p2 = make_project("P2", {RULE: "new"}, mtimes={RULE: 60})
    p3 = make_project("P3")
    return p1, p2, p3


@pytest.mark.asyncio
async def test_auto_confirm_spreads_the_newest_version(three_projects):
    p1, p2, p3 = three_projects

    summary = await run_multi_sync([p1, p2, p3], MultiSyncOptions(auto_confirm=True))

    assert (summary.updates, summary.additions, summary.conflicts) == (1, 1, 0)
    for project in (p1, p2, p3):
        assert (project.path / RULE).read_text() == "new"


@pytest.mark.asyncio
async def test_dry_run_matches_real_run_without_writing(make_project):
    def build(prefix):
        return [
            make_project(f"{prefix}/P1", {RULE: "old"}, mtimes={RULE: 0}),
            make_project(f"{prefix}/P2", {RULE: "new"}, mtimes={RULE: 60}),
            make_project(f"{prefix}/P3"),
        ]

    dry_projects = [ProjectInfo(name=p.path.name, path=p.path) for p in build("dry")]
    real_projects = [ProjectInfo(name=p.path.name, path=p.path) for p in build("real")]
    before = snapshot(*dry_projects)
    states = build_global_file_states(await scan_all_projects(dry_projects, [".clinerules"]))

    assert plan_sync(states, MultiSyncOptions(dry_run=True)) == plan_sync(states, MultiSyncOptions(auto_confirm=True))

    dry = await run_multi_sync(dry_projects, MultiSyncOptions(dry_run=True))
    real = await run_multi_sync(real_projects, MultiSyncOptions(auto_confirm=True))

    assert dry == real
    assert snapshot(*dry_projects) == before


@pytest.mark.asyncio
async def test_identical_projects_need_no_actions(make_project):
    projects = [make_project(name, {RULE: "same"}) for name in ("P1", "P2", "P3")]

    summary = await run_multi_sync(projects, MultiSyncOptions(auto_confirm=True))

    assert summary.total == 0


@pytest.mark.asyncio
async def test_local_files_stay_put(make_project):
    p1 = make_project("P1", {".clinerules/mine.local.md": "private"})
    p2 = make_project("P2")

    summary = await run_multi_sync([p1, p2], MultiSyncOptions(auto_confirm=True))

    assert summary.total == 0
    assert not (p2.path / ".clinerules/mine.local.md").exists()


@pytest.mark.asyncio
async def test_interactive_run_follows_answers(three_projects, fake_prompter):
    p1, p2, p3 = three_projects
    # Pick the older version from P1, then confirm
    prompter = fake_prompter(choices=[1], confirmations=[True])

    summary = await run_multi_sync([p1, p2, p3], MultiSyncOptions(), prompter)

    assert (summary.updates, summary.additions) == (1, 1)
    assert (p2.path / RULE).read_text() == "old"
    assert (p3.path / RULE).read_text() == "old"


@pytest.mark.asyncio
async def test_declining_confirmation_changes_nothing(three_projects, fake_prompter):
    p1, p2, p3 = three_projects
    before = snapshot(p1, p2, p3)
    prompter = fake_prompter(choices=[0], confirmations=[False])

    summary = await run_multi_sync([p1, p2, p3], MultiSyncOptions(), prompter)

    assert summary.skips == 2
    assert snapshot(p1, p2, p3) == before


@pytest.mark.asyncio
async def test_manifest_limits_additions(make_project):
    p1 = make_project("P1", {RULE: "rule", ".clinerules/b.md": "other"})
    p2 = make_project("P2", {".sync-manifest": f"{RULE}\n"})
    p3 = make_project("P3")

    summary = await run_multi_sync(
        [p1, p2, p3],
        MultiSyncOptions(auto_confirm=True, manifest_file=".sync-manifest"),
    )

    assert summary.additions == 1
    assert (p2.path / RULE).exists()
    assert not (p2.path / ".clinerules/b.md").exists()
    assert not (p3.path / RULE).exists()


@pytest.mark.asyncio
async def test_failed_projects_are_left_out(three_projects, temp_dir):
    p1, p2, _ = three_projects
    ghost = ProjectInfo(name="ghost", path=temp_dir / "ghost")

    summary = await run_multi_sync([p1, ghost, p2], MultiSyncOptions(auto_confirm=True))

    assert (summary.updates, summary.additions) == (1, 0)
    assert not (temp_dir / "ghost").exists()


@pytest.mark.asyncio
async def test_no_scannable_projects_raises(temp_dir):
    with pytest.raises(NoProjectsScannedError):
        await run_multi_sync([ProjectInfo(name="ghost", path=temp_dir / "ghost")], MultiSyncOptions())
