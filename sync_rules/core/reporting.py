"""Console output for file states, planned changes and run summaries."""

from collections import Counter
from datetime import datetime
from typing import Sequence

from sync_rules.core.models import GlobalFileState, MergeResult, ProjectInfo, SyncAction, SyncSummary
from sync_rules.utils.rich_console import get_console, print_panel, print_table


def format_time(moment: datetime) -> str:
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def print_file_state(state: GlobalFileState, index: int | None = None, total: int | None = None) -> None:
    """Show where a file exists, when each copy changed, and where it is missing."""
    heading = state.relative_path
    if index is not None and total is not None:
        heading = f"[{index}/{total}] {heading}"

    newest = state.newest_version
    rows = []
    for name, version in state.versions.items():
        digest = (version.file_info.hash or "unknown")[:8]
        marker = "newest" if newest is not None and name == newest.project_name else ""
        rows.append([name, format_time(version.last_modified), digest, marker])
    for name in state.missing_from:
        rows.append([name, "missing", "", ""])
    print_table(["Project", "Last modified", "Hash", ""], rows, title=heading)


def print_planned_summary(actions: Sequence[SyncAction]) -> None:
    """Show how many actions of each type are about to run, per project."""
    if not actions:
        get_console().print("No changes needed.", style="green")
        return
    per_project: dict[str, Counter] = {}
    for action in actions:
        per_project.setdefault(action.target_project, Counter())[action.type.value] += 1
    rows = [
        [project, counts["update"], counts["add"], counts["delete"]]
        for project, counts in sorted(per_project.items())
    ]
    print_table(["Project", "Updates", "Additions", "Deletions"], rows, title=f"Planned changes ({len(actions)} total)")


def print_sync_summary(summary: SyncSummary, dry_run: bool = False) -> None:
    rows = [
        ["Updated", summary.updates],
        ["Added", summary.additions],
        ["Deleted", summary.deletions],
        ["Skipped", summary.skips],
        ["Conflicts", summary.conflicts],
    ]
    print_table(["Result", "Files"], rows, title="Sync Rules Report")
    if dry_run:
        get_console().print("Dry-run mode: No changes were applied", style="yellow")
    if summary.has_conflicts:
        print_panel(f"{summary.conflicts} action(s) failed. See the log above for details.", title="Conflicts", style="bold red")


def print_merge_result(result: MergeResult, dry_run: bool = False) -> None:
    rows = [["Copied", result.copied], ["Merged", result.merged], ["Skipped", result.skipped]]
    print_table(["Result", "Files"], rows, title="Merge Report")
    if dry_run:
        get_console().print("Dry-run mode: No changes were applied", style="yellow")
    if result.any_conflicts:
        print_panel(
            "\n".join(result.conflicted_paths),
            title="Merged with conflicts (please review)",
            style="bold yellow",
        )


def print_projects(projects: Sequence[ProjectInfo], title: str = "Projects") -> None:
    print_table(["Name", "Path"], [[project.name, project.path] for project in projects], title=title)
