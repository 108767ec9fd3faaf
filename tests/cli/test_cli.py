"""Tests for the sync-rules command line."""

import json

import pytest
from typer.testing import CliRunner

from sync_rules.cli.main import app
from sync_rules.config import CONFIG_ENV_VAR

RULE = ".clinerules/a.md"

runner = CliRunner()


@pytest.fixture(autouse=True)
def empty_config(monkeypatch, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({}))
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    return config_path


def test_sync_auto_confirm_copies_the_newest_version(make_project):
    p1 = make_project("P1", {RULE: "old"}, mtimes={RULE: 0})
    p2 = make_project("P2", {RULE: "new"}, mtimes={RULE: 60})
    p3 = make_project("P3")

    result = runner.invoke(app, ["sync", str(p1.path), str(p2.path), str(p3.path), "--auto-confirm"])

    assert result.exit_code == 0, result.output
    assert "Sync Rules Report" in result.output
    assert (p1.path / RULE).read_text() == "new"
    assert (p3.path / RULE).read_text() == "new"


def test_sync_dry_run_leaves_files_alone(make_project):
    p1 = make_project("P1", {RULE: "only here"})
    p2 = make_project("P2")

    result = runner.invoke(app, ["sync", str(p1.path), str(p2.path), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry-run mode" in result.output
    assert not (p2.path / RULE).exists()


def test_sync_discovers_projects_under_base_dir(make_project, temp_dir):
    make_project("P1", {RULE: "shared"})
    p2 = make_project("P2", {".cursorrules": "cursor"})

    result = runner.invoke(app, ["sync", "--base-dir", str(temp_dir), "--auto-confirm"])

    assert result.exit_code == 0, result.output
    assert (p2.path / RULE).read_text() == "shared"


def test_sync_fails_for_missing_project(temp_dir):
    result = runner.invoke(app, ["sync", str(temp_dir / "missing"), "--auto-confirm"])

    assert result.exit_code == 1


def test_sync_fails_for_missing_explicit_config(make_project, temp_dir):
    p1 = make_project("P1")

    result = runner.invoke(app, ["sync", str(p1.path), "--config", str(temp_dir / "nope.json")])

    assert result.exit_code == 1


def test_merge_dry_run(make_project):
    source = make_project("source", {RULE: "theirs\n", ".clinerules/new.md": "fresh\n"})
    target = make_project("target", {RULE: "mine\n"})

    result = runner.invoke(app, ["merge", str(source.path), str(target.path), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Merge Report" in result.output
    assert not (target.path / ".clinerules/new.md").exists()


def test_merge_with_missing_editor_exits_with_error(make_project):
    source = make_project("source", {RULE: "theirs\n"})
    target = make_project("target", {RULE: "mine\n"})

    result = runner.invoke(
        app,
        ["merge", str(source.path), str(target.path), "--editor", "no-such-editor-for-sync-rules-tests"],
    )

    assert result.exit_code == 1
    assert (target.path / RULE).read_text() == "mine\n"


def test_discover_lists_projects(make_project, temp_dir):
    make_project("alpha", {".kilocode/a.md": "a"})

    result = runner.invoke(app, ["discover", "--base-dir", str(temp_dir)])

    assert result.exit_code == 0, result.output
    assert "alpha" in result.output
