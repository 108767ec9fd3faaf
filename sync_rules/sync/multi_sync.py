"""
Multi-Project Sync
==================

Runs the whole reconciliation for a set of projects: scan every project,
build the cross-project file states, decide and plan what to change,
optionally filter additions through per-project manifests, and execute.
"""

from typing import Mapping, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from sync_rules.core.executor import SyncExecutor
from sync_rules.core.manifest import filter_additions, load_manifests
from sync_rules.core.models import GlobalFileState, ProjectInfo, SyncAction, SyncSummary
from sync_rules.core.path_guard import PathGuard
from sync_rules.core.planner import needs_reconciliation, plan_actions_for_file, plan_auto_confirmed
from sync_rules.core.reporting import print_file_state, print_planned_summary
from sync_rules.core.scanner import scan_all_projects
from sync_rules.core.state_builder import build_global_file_states
from sync_rules.core.strategies import DecisionStrategyChain
from sync_rules.utils.file import DEFAULT_MAX_FILE_SIZE
from sync_rules.utils.prompts import ConsolePrompter, Prompter


class MultiSyncOptions(BaseModel):
    """Settings of one multi-project sync run."""

    rule_patterns: list[str] = Field(default_factory=lambda: [".clinerules", ".cursorrules", ".kilocode"])
    exclude_patterns: list[str] = Field(default_factory=list)
    dry_run: bool = False
    auto_confirm: bool = False
    manifest_file: str | None = None
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    model_config = ConfigDict(frozen=True)

    @property
    def interactive(self) -> bool:
        return not (self.dry_run or self.auto_confirm)


def review_file_states(file_states: Mapping[str, GlobalFileState], prompter: Prompter) -> list[SyncAction]:
    """Ask about every file that differs or is missing somewhere and plan the answers."""
    to_review = [state for state in file_states.values() if needs_reconciliation(state)]
    logger.info(
        f"Reviewing {len(to_review)} files for synchronization "
        f"({len(file_states) - len(to_review)} files are identical across all projects)"
    )

    chain = DecisionStrategyChain(prompter)
    actions: list[SyncAction] = []
    for index, state in enumerate(to_review, start=1):
        print_file_state(state, index, len(to_review))
        decision = chain.decide(state)
        actions.extend(plan_actions_for_file(state, decision))
    return actions


def plan_sync(
    file_states: Mapping[str, GlobalFileState],
    options: MultiSyncOptions,
    prompter: Prompter | None = None,
) -> list[SyncAction]:
    if not options.interactive:
        return plan_auto_confirmed(file_states.values())
    return review_file_states(file_states, prompter or ConsolePrompter())


async def run_multi_sync(
    projects: Sequence[ProjectInfo],
    options: MultiSyncOptions,
    prompter: Prompter | None = None,
) -> SyncSummary:
    """
    Synchronize rule files across projects.

    Args:
        projects: Projects taking part, in priority order for timestamp ties
        options: Run settings
        prompter: Source of interactive answers, the console when None

    Returns:
        SyncSummary: What was changed, or would be in a dry run

    Raises:
        NoProjectsScannedError: If none of the projects could be scanned
    """
    if options.dry_run:
        logger.info("DRY RUN enabled. No actual file changes will be made.")

    scan_results = await scan_all_projects(
        projects,
        options.rule_patterns,
        options.exclude_patterns,
        options.max_file_size,
    )
    file_states = build_global_file_states(scan_results)
    if not file_states:
        logger.info("No rule files found in any project.")
        return SyncSummary()

    actions = plan_sync(file_states, options, prompter)

    if options.manifest_file:
        manifests = load_manifests(scan_results.keys(), options.manifest_file)
        actions = filter_additions(actions, manifests)

    if not actions:
        logger.info("All files are synchronized. No changes needed.")
        return SyncSummary()

    print_planned_summary(actions)
    if options.interactive:
        prompter = prompter or ConsolePrompter()
        if not prompter.confirm("Proceed with these changes?"):
            logger.info("Sync cancelled by user.")
            return SyncSummary(skips=len(actions))

    scanned = list(scan_results.keys())
    executor = SyncExecutor(scanned, PathGuard(project.path for project in scanned), dry_run=options.dry_run)
    return executor.execute(actions)
