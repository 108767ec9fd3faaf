"""
Decision Strategies
===================

Maps a GlobalFileState to exactly one UserDecision. Strategies are tried in
a fixed order and the first one that matches decides; the default strategy
always matches and so comes last.
"""

from dataclasses import dataclass, field

from loguru import logger

from sync_rules.core.models import DecisionAction, FileVersion, GlobalFileState, UserDecision
from sync_rules.errors import DecisionError
from sync_rules.utils.prompts import Prompter

_SKIP = UserDecision(action=DecisionAction.SKIP)
_DELETE_ALL = UserDecision(action=DecisionAction.DELETE_ALL)
_USE_NEWEST = UserDecision(action=DecisionAction.USE_NEWEST)


class DecisionStrategy:
    """One scenario of the decision chain."""

    def matches(self, state: GlobalFileState) -> bool:
        raise NotImplementedError

    def decide(self, state: GlobalFileState, prompter: Prompter) -> UserDecision:
        raise NotImplementedError


def _skipping(state: GlobalFileState) -> UserDecision:
    logger.info(f"Skipping file: {state.relative_path}")
    return _SKIP


class SingleProjectStrategy(DecisionStrategy):
    """A file that exists in exactly one project."""

    def matches(self, state: GlobalFileState) -> bool:
        return len(state.versions) == 1 and len(state.missing_from) > 0

    def decide(self, state: GlobalFileState, prompter: Prompter) -> UserDecision:
        source = next(iter(state.versions))
        choice = prompter.select(
            f"File {state.relative_path} exists only in {source}. What should be done?",
            [
                (f"Copy from {source} to {len(state.missing_from)} other project(s)", _USE_NEWEST),
                (f"Delete from {source} (remove from all projects)", _DELETE_ALL),
                ("Skip this file", _SKIP),
            ],
        )
        return _skipping(state) if choice is _SKIP else choice


class IdenticalWithMissingStrategy(DecisionStrategy):
    """A file identical wherever it exists but missing from some projects."""

    def matches(self, state: GlobalFileState) -> bool:
        return len(state.versions) > 1 and state.all_identical and len(state.missing_from) > 0

    def decide(self, state: GlobalFileState, prompter: Prompter) -> UserDecision:
        source = state.newest_version.project_name
        choice = prompter.select(
            f"File {state.relative_path} is identical in {len(state.versions)} projects "
            f"but missing from {len(state.missing_from)}. What should be done?",
            [
                (f"Add to {len(state.missing_from)} missing project(s) using version from {source}", _USE_NEWEST),
                (f"Delete from all {len(state.versions)} projects that have it", _DELETE_ALL),
                ("Skip this file", _SKIP),
            ],
        )
        return _skipping(state) if choice is _SKIP else choice


@dataclass
class VersionGroup:
    """Versions sharing one content hash."""

    newest: FileVersion
    projects: list[str] = field(default_factory=list)


class DifferentVersionsStrategy(DecisionStrategy):
    """A file whose content differs between projects."""

    def matches(self, state: GlobalFileState) -> bool:
        return len(state.versions) > 1 and not state.all_identical

    @staticmethod
    def group_versions(state: GlobalFileState) -> list[VersionGroup]:
        """Group versions by hash, most recently modified group first.

        Unhashed versions share a single group. Groups with equal timestamps
        keep project order.
        """
        groups: dict[str, VersionGroup] = {}
        for version in state.versions.values():
            key = version.file_info.hash or ""
            group = groups.setdefault(key, VersionGroup(newest=version))
            group.projects.append(version.project_name)
            if version.last_modified > group.newest.last_modified:
                group.newest = version
        return sorted(groups.values(), key=lambda group: group.newest.last_modified, reverse=True)

    def decide(self, state: GlobalFileState, prompter: Prompter) -> UserDecision:
        groups = self.group_versions(state)
        options: list[tuple[str, UserDecision]] = []
        for index, group in enumerate(groups, start=1):
            plural = "s" if len(group.projects) > 1 else ""
            options.append(
                (
                    f"Use version {index} (from {group.newest.project_name}, used in {len(group.projects)} project{plural})",
                    UserDecision(action=DecisionAction.USE_SPECIFIC, source_project=group.newest.project_name),
                )
            )
        options.append(("Delete from all projects", _DELETE_ALL))
        options.append(("Skip this file", _SKIP))

        choice = prompter.select(f"Different versions found for {state.relative_path}. Which version should be used?", options)
        return _skipping(state) if choice is _SKIP else choice


class DefaultStrategy(DecisionStrategy):
    """Fallback that always uses the newest version."""

    def matches(self, state: GlobalFileState) -> bool:
        return True

    def decide(self, state: GlobalFileState, prompter: Prompter) -> UserDecision:
        return _USE_NEWEST


class DecisionStrategyChain:
    """Runs the strategies in order; the first match decides."""

    def __init__(self, prompter: Prompter, strategies: list[DecisionStrategy] | None = None):
        self.prompter = prompter
        self.strategies = strategies if strategies is not None else [
            SingleProjectStrategy(),
            IdenticalWithMissingStrategy(),
            DifferentVersionsStrategy(),
            DefaultStrategy(),
        ]

    def decide(self, state: GlobalFileState) -> UserDecision:
        for strategy in self.strategies:
            if strategy.matches(state):
                logger.debug(f"{type(strategy).__name__} handles {state.relative_path}")
                return strategy.decide(state, self.prompter)
        raise DecisionError(f"No strategy matched the file state for {state.relative_path}")
