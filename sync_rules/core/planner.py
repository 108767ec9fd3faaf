"""Turns decisions about file states into concrete sync actions."""

from typing import Iterable

from loguru import logger

from sync_rules.core.models import (
    DecisionAction,
    FileVersion,
    GlobalFileState,
    SyncAction,
    SyncActionType,
    UserDecision,
)


def _resolve_source(state: GlobalFileState, decision: UserDecision) -> FileVersion | None:
    if decision.action is DecisionAction.USE_SPECIFIC:
        return state.versions.get(decision.source_project)
    return state.newest_version


def _differs(first: FileVersion, second: FileVersion) -> bool:
    first_hash = first.file_info.hash
    second_hash = second.file_info.hash
    if not first_hash or not second_hash:
        return True
    return first_hash != second_hash


def plan_actions_for_file(state: GlobalFileState, decision: UserDecision) -> list[SyncAction]:
    """
    Plan the actions that carry out one decision.

    Args:
        state: The file's cross-project state
        decision: What should happen to the file

    Returns:
        list[SyncAction]: Actions in project order, never targeting the source
    """
    if decision.action is DecisionAction.SKIP:
        return []

    if decision.action is DecisionAction.DELETE_ALL:
        return [
            SyncAction(
                type=SyncActionType.DELETE,
                target_project=project_name,
                relative_path=state.relative_path,
                target_file=version.file_info,
            )
            for project_name, version in state.versions.items()
        ]

    source = _resolve_source(state, decision)
    if source is None:
        logger.warning(f"No source version of {state.relative_path} in {decision.source_project}; nothing to do")
        return []

    actions: list[SyncAction] = []
    for project_name, version in state.versions.items():
        if project_name == source.project_name or not _differs(version, source):
            continue
        actions.append(
            SyncAction(
                type=SyncActionType.UPDATE,
                target_project=project_name,
                source_project=source.project_name,
                relative_path=state.relative_path,
                source_file=source.file_info,
                target_file=version.file_info,
            )
        )

    for project_name in state.missing_from:
        actions.append(
            SyncAction(
                type=SyncActionType.ADD,
                target_project=project_name,
                source_project=source.project_name,
                relative_path=state.relative_path,
                source_file=source.file_info,
            )
        )
    return actions


def needs_reconciliation(state: GlobalFileState) -> bool:
    """False only when every project holds the same content."""
    return not (state.all_identical and not state.missing_from)


def plan_auto_confirmed(states: Iterable[GlobalFileState]) -> list[SyncAction]:
    """Plan use-newest for every state that needs reconciliation."""
    decision = UserDecision(action=DecisionAction.USE_NEWEST)
    actions: list[SyncAction] = []
    for state in states:
        if needs_reconciliation(state):
            actions.extend(plan_actions_for_file(state, decision))
    logger.debug(f"Planned {len(actions)} action(s) without prompting")
    return actions
