"""Finding the projects that take part in a sync run."""

import os
from pathlib import Path
from typing import Iterable

from loguru import logger

from sync_rules.core.globs import is_glob_pattern
from sync_rules.core.models import ProjectInfo
from sync_rules.core.path_guard import normalize_path
from sync_rules.errors import DiscoveryError, DuplicateProjectError

DEFAULT_BASE_DIR = Path("~/Developer")
DEFAULT_RULE_PATTERNS = [".clinerules", ".cursorrules", ".kilocode"]
DEFAULT_DISCOVERY_EXCLUDES = ["node_modules", ".git", "dist", "build"]


def has_rule_files(project_dir: Path, rule_patterns: Iterable[str]) -> bool:
    """Check whether a directory holds a top-level entry named like a rule pattern."""
    try:
        entries = set(os.listdir(project_dir))
    except OSError as error:
        logger.debug(f"Could not check rule files in {project_dir}: {error}")
        return False
    names = {pattern.strip("/") for pattern in rule_patterns if not is_glob_pattern(pattern)}
    return bool(entries & names)


def discover_projects(
    base_dir: str | Path = DEFAULT_BASE_DIR,
    rule_patterns: Iterable[str] = DEFAULT_RULE_PATTERNS,
    exclude_patterns: Iterable[str] = DEFAULT_DISCOVERY_EXCLUDES,
) -> list[ProjectInfo]:
    """
    List the immediate subdirectories of base_dir that contain rule files.

    Args:
        base_dir: Directory holding the projects
        rule_patterns: Rule names to look for at each project's top level
        exclude_patterns: Subdirectory names to ignore

    Returns:
        list[ProjectInfo]: Projects sorted by name

    Raises:
        DiscoveryError: If base_dir does not exist or cannot be read
    """
    base = normalize_path(base_dir)
    logger.info(f"Discovering projects in: {base}")
    if not base.exists():
        raise DiscoveryError(f"Base directory does not exist: {base_dir}")
    if not base.is_dir():
        raise DiscoveryError(f"Base directory is not a directory: {base_dir}")

    excluded = set(exclude_patterns)
    rule_patterns = list(rule_patterns)
    try:
        names = sorted(os.listdir(base))
    except OSError as error:
        raise DiscoveryError(f"Error discovering projects in {base_dir}: {error}") from error

    projects = []
    for name in names:
        candidate = base / name
        if name in excluded or not candidate.is_dir():
            continue
        if has_rule_files(candidate, rule_patterns):
            projects.append(ProjectInfo(name=name, path=candidate))
            logger.debug(f"  Found project: {name} at {candidate}")

    logger.info(f"Discovered {len(projects)} projects with rule files")
    return projects


def projects_from_paths(paths: Iterable[str | Path]) -> list[ProjectInfo]:
    """
    Build projects from explicit directories, named after the directory.

    Raises:
        DiscoveryError: If a path is missing or not a directory
        DuplicateProjectError: If two directories share a name
    """
    projects = []
    for raw_path in paths:
        path = normalize_path(raw_path)
        if not path.exists():
            raise DiscoveryError(f"Project directory does not exist: {raw_path}")
        if not path.is_dir():
            raise DiscoveryError(f"Project path is not a directory: {raw_path}")
        projects.append(ProjectInfo(name=path.name, path=path))
    validate_unique_project_names(projects)
    return projects


def validate_unique_project_names(projects: Iterable[ProjectInfo]) -> None:
    seen: dict[str, Path] = {}
    for project in projects:
        if project.name in seen:
            raise DuplicateProjectError(project.name, seen[project.name], project.path)
        seen[project.name] = project.path
