"""
Sync Executor
=============

Applies planned sync actions to the project directories. Each action
stands alone: a failing action is logged, counted as a conflict, and the
remaining actions still run.
"""

from collections import defaultdict
from pathlib import Path
from typing import Iterable, Mapping

from loguru import logger

from sync_rules.core.models import ProjectInfo, SyncAction, SyncActionType, SyncSummary
from sync_rules.core.path_guard import PathGuard
from sync_rules.errors import ActionExecutionError, PathGuardError
from sync_rules.utils.file import copy_file_bytes


class SyncExecutor:
    """Executes sync actions against a fixed set of projects.

    Every path is checked against the root of the project the action
    targets, and against ``path_guard`` when one is given.
    """

    def __init__(self, projects: Iterable[ProjectInfo], path_guard: PathGuard | None = None, dry_run: bool = False):
        self.projects: Mapping[str, ProjectInfo] = {project.name: project for project in projects}
        self.path_guard = path_guard or PathGuard(project.path for project in self.projects.values())
        self.project_guards: Mapping[str, PathGuard] = {
            name: PathGuard([project.path]) for name, project in self.projects.items()
        }
        self.dry_run = dry_run

    def _project(self, action: SyncAction) -> ProjectInfo:
        project = self.projects.get(action.target_project)
        if project is None:
            raise ActionExecutionError(
                f"Unknown target project: {action.target_project}",
                action.relative_path,
                action.type.value,
            )
        return project

    def _validate(self, action: SyncAction, path: Path) -> Path:
        project = self._project(action)
        return self.path_guard.validate_path(self.project_guards[project.name].validate_path(path))

    def target_path(self, action: SyncAction) -> Path:
        """Return the validated path an action writes to or deletes."""
        return self._validate(action, self._project(action).path / action.relative_path)

    def group_by_directory(self, actions: Iterable[SyncAction]) -> list[tuple[Path, list[SyncAction]]]:
        """Group actions by target parent directory, directories sorted."""
        groups: dict[Path, list[SyncAction]] = defaultdict(list)
        for action in actions:
            project = self.projects.get(action.target_project)
            base = project.path if project else Path(action.target_project)
            groups[(base / action.relative_path).parent].append(action)
        return sorted(groups.items(), key=lambda item: str(item[0]))

    def execute(self, actions: Iterable[SyncAction]) -> SyncSummary:
        """
        Execute actions and report what happened.

        Args:
            actions: Planned actions

        Returns:
            SyncSummary: Counts per action type plus failed actions as conflicts
        """
        summary = SyncSummary()
        for directory, group in self.group_by_directory(actions):
            prepared: set[str] = set()
            for action in group:
                try:
                    if action.type in (SyncActionType.ADD, SyncActionType.UPDATE) and action.target_project not in prepared:
                        self._ensure_directory(action, directory)
                        prepared.add(action.target_project)
                    self.execute_action(action)
                    summary.record(action.type)
                except (ActionExecutionError, PathGuardError, OSError) as error:
                    logger.error(f"Failed to {action.type.value} {action.relative_path} in {action.target_project}: {error}")
                    summary.conflicts += 1

        mode = "Dry run" if self.dry_run else "Sync"
        logger.info(
            f"{mode} finished: {summary.updates} updated, {summary.additions} added, "
            f"{summary.deletions} deleted, {summary.skips} skipped, {summary.conflicts} failed"
        )
        return summary

    def execute_action(self, action: SyncAction) -> None:
        """Apply a single action; raises on failure."""
        target = self.target_path(action)

        if action.type in (SyncActionType.ADD, SyncActionType.UPDATE):
            source = action.source_file.absolute_path
            if self.dry_run:
                logger.info(f"[DRY RUN] Would {action.type.value} {target} from {action.source_project}")
                return
            copy_file_bytes(source, target)
            logger.debug(f"Copied {source} to {target} ({action.type.value})")
        elif action.type is SyncActionType.DELETE:
            if self.dry_run:
                logger.info(f"[DRY RUN] Would delete {target}")
                return
            target.unlink()
            logger.debug(f"Deleted {target}")
        else:
            logger.debug(f"Skipping {action.relative_path} in {action.target_project}")

    def _ensure_directory(self, action: SyncAction, directory: Path) -> None:
        self._validate(action, directory)
        if self.dry_run:
            if not directory.exists():
                logger.info(f"[DRY RUN] Would create directory {directory}")
            return
        directory.mkdir(parents=True, exist_ok=True)
