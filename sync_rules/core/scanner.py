"""
Rule File Scanner
=================

Finds candidate rule files in a project directory, hashes them, and scans
many projects concurrently.
"""

import asyncio
import os
import re
from pathlib import Path
from typing import Iterable, Sequence

from loguru import logger

from sync_rules.core.globs import GlobMatcher, expand_exclude_patterns, expand_rule_patterns, separate_patterns
from sync_rules.core.models import FileInfo, ProjectInfo
from sync_rules.errors import HashError, NoProjectsScannedError, ScanError
from sync_rules.utils.file import DEFAULT_MAX_FILE_SIZE, compute_file_hash
from sync_rules.utils.logging import timeit

LOCAL_FILE_PATTERN = re.compile(r"\.local\.")

ScanResults = dict[ProjectInfo, dict[str, FileInfo]]


def is_local_file(file_path: str | Path) -> bool:
    """Check whether a file name follows the ``*.local.*`` convention."""
    return bool(LOCAL_FILE_PATTERN.search(Path(file_path).name))


def scan_directory(
    base_dir: str | Path,
    rule_patterns: Iterable[str],
    exclude_patterns: Iterable[str] = (),
) -> dict[str, FileInfo]:
    """
    Find files under base_dir matching the rule patterns.

    Symbolic links are neither followed nor returned. Hashes are not
    computed here.

    Args:
        base_dir: Directory to scan
        rule_patterns: Glob patterns or literal names; a leading ``!`` excludes
        exclude_patterns: Glob patterns or literal names to ignore

    Returns:
        dict[str, FileInfo]: Files keyed by POSIX relative path

    Raises:
        ScanError: If base_dir does not exist or cannot be read
    """
    base = Path(os.path.abspath(os.path.expanduser(str(base_dir))))
    if not base.is_dir():
        raise ScanError(f"Project directory does not exist or is not a directory: {base}", base)
    try:
        os.listdir(base)
    except OSError as error:
        raise ScanError(f"Cannot read project directory {base}: {error}", base) from error

    positive, negative = separate_patterns(rule_patterns)
    matcher = GlobMatcher(
        expand_rule_patterns(positive),
        expand_exclude_patterns(exclude_patterns) + expand_rule_patterns(negative),
    )
    found: dict[str, FileInfo] = {}

    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Skipping unreadable directory {error.filename}: {error.strerror}")

    for root, dirs, files in os.walk(base, topdown=True, onerror=_on_walk_error, followlinks=False):
        root_path = Path(root)
        kept_dirs = []
        for dirname in sorted(dirs):
            dir_path = root_path / dirname
            if dir_path.is_symlink():
                logger.debug(f"Skipping symlinked directory: {dir_path}")
                continue
            if matcher.is_ignored(dir_path.relative_to(base).as_posix()):
                continue
            kept_dirs.append(dirname)
        dirs[:] = kept_dirs

        for name in files:
            file_path = root_path / name
            relative_path = file_path.relative_to(base).as_posix()
            if not matcher.matches(relative_path):
                continue
            if file_path.is_symlink():
                logger.debug(f"Skipping symlinked file: {file_path}")
                continue
            found[relative_path] = FileInfo(
                relative_path=relative_path,
                absolute_path=file_path,
                is_local=is_local_file(relative_path),
            )

    return dict(sorted(found.items()))


def scan(
    project_dir: str | Path,
    rule_patterns: Iterable[str],
    exclude_patterns: Iterable[str] = (),
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> dict[str, FileInfo]:
    """
    Scan a project for rule files and hash each one.

    A file that cannot be hashed keeps ``hash=None`` and is treated as
    differing from every other version.

    Raises:
        ScanError: If the project directory cannot be scanned
    """
    logger.debug(f"Scanning {project_dir}")
    files = scan_directory(project_dir, rule_patterns, exclude_patterns)

    hashed: dict[str, FileInfo] = {}
    for relative_path, file_info in files.items():
        try:
            digest = compute_file_hash(file_info.absolute_path, max_file_size)
        except HashError as error:
            logger.warning(f"Could not calculate hash for {file_info.absolute_path}: {error}")
            digest = None
        hashed[relative_path] = file_info.model_copy(update={"hash": digest})

    logger.debug(f"Found {len(hashed)} rule files in {project_dir}")
    return hashed


@timeit
async def scan_all_projects(
    projects: Sequence[ProjectInfo],
    rule_patterns: Sequence[str],
    exclude_patterns: Sequence[str] = (),
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> ScanResults:
    """
    Scan every project concurrently.

    A project that fails to scan is logged and left out of the result, and
    so out of the rest of the run.

    Returns:
        ScanResults: Files per successfully scanned project, in input order

    Raises:
        NoProjectsScannedError: If no project could be scanned
    """
    logger.info(f"Scanning {len(projects)} projects in parallel...")

    async def _scan_project(project: ProjectInfo) -> dict[str, FileInfo] | None:
        try:
            return await asyncio.to_thread(scan, project.path, rule_patterns, exclude_patterns, max_file_size)
        except (ScanError, OSError) as error:
            logger.warning(f"Skipping project {project.name} due to scan error: {error}")
            return None

    outcomes = await asyncio.gather(*(_scan_project(project) for project in projects))

    results: ScanResults = {}
    skipped: list[str] = []
    for project, files in zip(projects, outcomes):
        if files is None:
            skipped.append(project.name)
        else:
            results[project] = files

    if skipped:
        logger.warning(f"Skipped {len(skipped)} project(s) due to scanning errors: {', '.join(skipped)}")
    if not results:
        raise NoProjectsScannedError("No projects could be successfully scanned")

    logger.info(f"Successfully scanned {len(results)} project(s)")
    return results
