"""
Two-Directory Merge
===================

Legacy pairwise mode: brings a target directory in line with a source
directory. Files only in the source are copied; files in both with
different content are merged with ``git merge-file``, and conflicting
merges are handed to an editor for manual resolution. Any copy or merge
error aborts the rest of the batch.
"""

import subprocess
from pathlib import Path
from typing import Callable, Mapping

from loguru import logger

from sync_rules.core.models import FileInfo, MergeOperation, MergeOperationType, MergeResult
from sync_rules.errors import ActionExecutionError, ExternalToolUnavailableError
from sync_rules.utils.file import copy_file_bytes, create_temporary_file, remove_file_quietly

Runner = Callable[..., subprocess.CompletedProcess]

# git merge-file exits with the number of conflicts, or a negative value on error
GIT_MERGE_ERROR_CODE = 255


class ToolAvailability:
    """Remembers whether the merge tool and the editor can be run.

    Each tool is probed with ``--version`` at most once per instance.
    """

    def __init__(self, merge_tool: str = "git", editor: str = "code", runner: Runner = subprocess.run):
        self.merge_tool = merge_tool
        self.editor = editor
        self.runner = runner
        self._checked: dict[str, bool] = {}

    def is_available(self, tool: str) -> bool:
        if tool not in self._checked:
            try:
                self.runner([tool, "--version"], stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=True)
                self._checked[tool] = True
                logger.debug(f"{tool} is available")
            except (OSError, subprocess.CalledProcessError) as error:
                logger.warning(f"{tool} not found or failed to execute: {error}")
                self._checked[tool] = False
        return self._checked[tool]

    def require(self, tool: str, relative_path: str | None = None) -> None:
        if not self.is_available(tool):
            raise ExternalToolUnavailableError(tool, relative_path)


def determine_operations(
    source_files: Mapping[str, FileInfo],
    target_files: Mapping[str, FileInfo],
) -> list[MergeOperation]:
    """Classify every path found in either directory, sorted by path."""
    operations: list[MergeOperation] = []
    for relative_path in sorted(set(source_files) | set(target_files)):
        source = source_files.get(relative_path)
        target = target_files.get(relative_path)

        if (source and source.is_local) or (target and target.is_local):
            action = MergeOperationType.SKIP_LOCAL
        elif source and target:
            if not source.hash or not target.hash:
                logger.warning(f"Hash missing for {relative_path}. Defaulting to MERGE.")
                action = MergeOperationType.MERGE
            elif source.hash == target.hash:
                action = MergeOperationType.SKIP_IDENTICAL
            else:
                action = MergeOperationType.MERGE
        elif source:
            action = MergeOperationType.COPY_TO_TARGET
        else:
            action = MergeOperationType.SKIP_TARGET_ONLY

        operations.append(
            MergeOperation(action=action, relative_path=relative_path, source_file=source, target_file=target)
        )
    return operations


class MergeResolver:
    """Applies merge operations from a source directory to a target directory."""

    def __init__(
        self,
        source_dir: str | Path,
        target_dir: str | Path,
        dry_run: bool = False,
        tools: ToolAvailability | None = None,
        runner: Runner = subprocess.run,
    ):
        self.source_dir = Path(source_dir)
        self.target_dir = Path(target_dir)
        self.dry_run = dry_run
        self.runner = runner
        self.tools = tools or ToolAvailability(runner=runner)

    def determine_operations(
        self,
        source_files: Mapping[str, FileInfo],
        target_files: Mapping[str, FileInfo],
    ) -> list[MergeOperation]:
        return determine_operations(source_files, target_files)

    def resolve(self, source_files: Mapping[str, FileInfo], target_files: Mapping[str, FileInfo]) -> MergeResult:
        """
        Run every operation in order.

        Returns:
            MergeResult: Counts and the paths left with conflicts

        Raises:
            ExternalToolUnavailableError: If a merge is needed and a tool is missing
            ActionExecutionError: If a copy or merge fails
        """
        logger.info("Starting merge phase...")
        if self.dry_run:
            logger.info("DRY RUN enabled. No actual file changes will be made.")

        result = MergeResult()
        for operation in self.determine_operations(source_files, target_files):
            if operation.action is MergeOperationType.COPY_TO_TARGET:
                self.copy(operation)
                result.copied += 1
            elif operation.action is MergeOperationType.MERGE:
                if self.merge(operation):
                    result.any_conflicts = True
                    result.conflicted_paths.append(operation.relative_path)
                result.merged += 1
            else:
                logger.info(f"Skipping ({operation.action.value}): {operation.relative_path}")
                result.skipped += 1

        logger.info("Merge phase complete.")
        return result

    def copy(self, operation: MergeOperation) -> None:
        destination = self.target_dir / operation.relative_path
        source = operation.source_file.absolute_path
        if self.dry_run:
            logger.info(f"[DRY RUN] Would copy: {source} -> {destination}")
            return
        logger.info(f"Copying: {source} -> {destination}")
        try:
            copy_file_bytes(source, destination)
        except OSError as error:
            raise ActionExecutionError(
                f"Error copying {source} to {destination}: {error}",
                operation.relative_path,
                operation.action.value,
            ) from error

    def merge(self, operation: MergeOperation) -> bool:
        """
        Merge the source version into the target file.

        Returns:
            bool: True if the merge left conflicts for the user to resolve
        """
        relative_path = operation.relative_path
        if self.dry_run:
            logger.info(f"[DRY RUN] Would merge: {relative_path}")
            return False

        logger.info(f"Merging: {relative_path}")
        self.tools.require(self.tools.merge_tool, relative_path)
        self.tools.require(self.tools.editor, relative_path)

        target_path = operation.target_file.absolute_path
        base_path = create_temporary_file("", Path(relative_path).suffix or None)
        try:
            conflicts = self._merge_file(target_path, base_path, operation.source_file.absolute_path, relative_path)
            if not conflicts:
                logger.info(f"git merge-file completed successfully for {relative_path}. No conflicts detected.")
                return False

            logger.warning(f"git merge-file resulted in conflicts for {relative_path}. Opening {self.tools.editor}.")
            self._open_editor(target_path, relative_path)
            logger.info(f"Conflict resolution completed for {relative_path}. Please verify the resolved conflicts.")
            return True
        finally:
            remove_file_quietly(base_path)

    def _merge_file(self, target_path: Path, base_path: Path, source_path: Path, relative_path: str) -> bool:
        command = [self.tools.merge_tool, "merge-file", "-p", str(target_path), str(base_path), str(source_path)]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            completed = self.runner(command, stdout=subprocess.PIPE, stderr=subprocess.PIPE, check=False)
        except OSError as error:
            raise ActionExecutionError(f"Failed to run git merge-file: {error}", relative_path, "MERGE") from error

        if completed.returncode < 0 or completed.returncode >= GIT_MERGE_ERROR_CODE:
            stderr = (completed.stderr or b"").decode("utf-8", errors="replace").strip()
            raise ActionExecutionError(f"git merge-file failed for {relative_path}: {stderr}", relative_path, "MERGE")

        target_path.write_bytes(completed.stdout or b"")
        logger.debug(f"git merge-file exited with {completed.returncode}; output written to {target_path}")
        return completed.returncode != 0

    def _open_editor(self, target_path: Path, relative_path: str) -> None:
        try:
            self.runner([self.tools.editor, str(target_path), "--wait"], check=True)
        except (OSError, subprocess.CalledProcessError) as error:
            raise ActionExecutionError(
                f"Failed to open {self.tools.editor} for {relative_path}: {error}",
                relative_path,
                "MERGE",
            ) from error
