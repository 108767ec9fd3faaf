"""Aggregation of per-project scan results into cross-project file states."""

import os
from datetime import datetime, timezone
from typing import Callable, Mapping

from loguru import logger

from sync_rules.core.models import FileInfo, FileVersion, GlobalFileState, ProjectInfo

MtimeReader = Callable[[FileInfo], datetime]


def read_last_modified(file_info: FileInfo) -> datetime:
    """Return a file's modification time as an aware UTC datetime."""
    return datetime.fromtimestamp(os.stat(file_info.absolute_path).st_mtime, tz=timezone.utc)


def build_global_file_states(
    scan_results: Mapping[ProjectInfo, Mapping[str, FileInfo]],
    mtime_reader: MtimeReader = read_last_modified,
) -> dict[str, GlobalFileState]:
    """
    Build one GlobalFileState per relative path seen in any project.

    Local files are left out. Project order in scan_results decides
    ``missing_from`` order and breaks ties between equally new versions.

    Args:
        scan_results: Scanner output per project
        mtime_reader: Reads a file's modification time

    Returns:
        dict[str, GlobalFileState]: States sorted by relative path
    """
    project_names = [project.name for project in scan_results]
    collected: dict[str, dict[str, FileVersion]] = {}

    # First pass: record every non-local file as a version of its path
    for project, files in scan_results.items():
        for relative_path, file_info in files.items():
            if file_info.is_local:
                continue
            try:
                last_modified = mtime_reader(file_info)
            except OSError as error:
                logger.warning(
                    f"Treating {relative_path} as missing from {project.name}: cannot read modification time ({error})"
                )
                continue
            collected.setdefault(relative_path, {})[project.name] = FileVersion(
                project_name=project.name,
                file_info=file_info,
                last_modified=last_modified,
            )

    # Second pass: freeze each path's state with the projects that lack it
    states: dict[str, GlobalFileState] = {}
    for relative_path in sorted(collected):
        versions = collected[relative_path]
        states[relative_path] = GlobalFileState(
            relative_path=relative_path,
            versions=versions,
            missing_from=tuple(name for name in project_names if name not in versions),
        )

    logger.info(f"Found {len(states)} unique rule files across all projects")
    return states
