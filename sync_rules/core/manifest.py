"""
Per-project manifests restricting which rule files a project receives.

A manifest is a plain text file at the project root listing one relative
path per line. Blank lines and ``#`` comments are ignored.
"""

from typing import Iterable, Mapping

from loguru import logger

from sync_rules.core.models import ProjectInfo, SyncAction, SyncActionType


def parse_manifest(text: str) -> frozenset[str]:
    entries = set()
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.add(line.replace("\\", "/").removeprefix("./"))
    return frozenset(entries)


def load_manifest(project: ProjectInfo, manifest_name: str) -> frozenset[str] | None:
    """Read a project's manifest; None when the project has none."""
    manifest_path = project.path / manifest_name
    if not manifest_path.is_file():
        logger.debug(f"No manifest {manifest_name} in {project.name}")
        return None
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        logger.warning(f"Could not read manifest {manifest_path}: {error}")
        return None
    return parse_manifest(text)


def load_manifests(projects: Iterable[ProjectInfo], manifest_name: str) -> dict[str, frozenset[str] | None]:
    return {project.name: load_manifest(project, manifest_name) for project in projects}


def filter_additions(
    actions: Iterable[SyncAction],
    manifests: Mapping[str, frozenset[str] | None],
) -> list[SyncAction]:
    """
    Drop additions the target project's manifest does not ask for.

    Updates, deletes and skips pass through unchanged.
    """
    kept: list[SyncAction] = []
    for action in actions:
        if action.type is SyncActionType.ADD:
            manifest = manifests.get(action.target_project)
            if manifest is None or action.relative_path not in manifest:
                logger.debug(f"Manifest of {action.target_project} does not list {action.relative_path}; not adding")
                continue
        kept.append(action)
    return kept
