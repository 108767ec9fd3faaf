"""Data model shared by the scan, plan and execute phases."""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FileInfo(BaseModel):
    """A single rule file found while scanning one directory."""

    relative_path: str
    absolute_path: Path
    hash: str | None = None
    is_local: bool = False
    model_config = ConfigDict(frozen=True)


class ProjectInfo(BaseModel):
    """A project taking part in synchronization."""

    name: str
    path: Path
    model_config = ConfigDict(frozen=True)


class FileVersion(BaseModel):
    """One project's copy of a rule file."""

    project_name: str
    file_info: FileInfo
    last_modified: datetime
    model_config = ConfigDict(frozen=True)


class GlobalFileState(BaseModel):
    """Cross-project view of one relative path.

    ``versions`` preserves project order, which is what makes
    ``newest_version`` deterministic when timestamps tie.
    """

    relative_path: str
    versions: dict[str, FileVersion] = Field(default_factory=dict)
    missing_from: tuple[str, ...] = ()
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_projects(self) -> "GlobalFileState":
        overlap = set(self.versions) & set(self.missing_from)
        if overlap:
            raise ValueError(f"Projects both hold and miss {self.relative_path}: {sorted(overlap)}")
        for name, version in self.versions.items():
            if version.project_name != name:
                raise ValueError(f"Version keyed as {name} belongs to {version.project_name}")
        return self

    @property
    def newest_version(self) -> FileVersion | None:
        """The most recently modified version; the first project wins ties."""
        if not self.versions:
            return None
        return max(self.versions.values(), key=lambda version: version.last_modified)

    @property
    def all_identical(self) -> bool:
        """True only for two or more versions that all share one hash."""
        if len(self.versions) < 2:
            return False
        hashes = [version.file_info.hash for version in self.versions.values()]
        if any(not digest for digest in hashes):
            return False
        return len(set(hashes)) == 1


class DecisionAction(str, Enum):
    USE_NEWEST = "use-newest"
    USE_SPECIFIC = "use-specific"
    DELETE_ALL = "delete-all"
    SKIP = "skip"


class UserDecision(BaseModel):
    """What should happen to one file state."""

    action: DecisionAction
    source_project: str | None = None
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_source(self) -> "UserDecision":
        if self.action is DecisionAction.USE_SPECIFIC and not self.source_project:
            raise ValueError("use-specific decisions need a source project")
        if self.action is not DecisionAction.USE_SPECIFIC and self.source_project is not None:
            raise ValueError(f"{self.action.value} decisions take no source project")
        return self


class SyncActionType(str, Enum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    SKIP = "skip"


class SyncAction(BaseModel):
    """A concrete filesystem change for one project."""

    type: SyncActionType
    target_project: str
    relative_path: str
    source_project: str | None = None
    source_file: FileInfo | None = None
    target_file: FileInfo | None = None
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_references(self) -> "SyncAction":
        if self.type in (SyncActionType.ADD, SyncActionType.UPDATE):
            if self.source_file is None or self.source_project is None:
                raise ValueError(f"{self.type.value} actions need a source")
            if self.source_project == self.target_project:
                raise ValueError(f"{self.target_project} cannot be both source and target")
        if self.type is SyncActionType.UPDATE and self.target_file is None:
            raise ValueError("update actions need a target file")
        if self.type is SyncActionType.DELETE and self.target_file is None:
            raise ValueError("delete actions need a target file")
        return self


class SyncSummary(BaseModel):
    """Outcome counts of one execution run."""

    updates: int = 0
    additions: int = 0
    deletions: int = 0
    skips: int = 0
    conflicts: int = 0

    def record(self, action_type: SyncActionType) -> None:
        if action_type is SyncActionType.UPDATE:
            self.updates += 1
        elif action_type is SyncActionType.ADD:
            self.additions += 1
        elif action_type is SyncActionType.DELETE:
            self.deletions += 1
        else:
            self.skips += 1

    @property
    def total(self) -> int:
        return self.updates + self.additions + self.deletions + self.skips + self.conflicts

    @property
    def has_conflicts(self) -> bool:
        return self.conflicts > 0


class MergeOperationType(str, Enum):
    COPY_TO_TARGET = "COPY_TO_TARGET"
    MERGE = "MERGE"
    SKIP_IDENTICAL = "SKIP_IDENTICAL"
    SKIP_TARGET_ONLY = "SKIP_TARGET_ONLY"
    SKIP_LOCAL = "SKIP_LOCAL"


class MergeOperation(BaseModel):
    """Classification of one path in the two-directory mode."""

    action: MergeOperationType
    relative_path: str
    source_file: FileInfo | None = None
    target_file: FileInfo | None = None
    model_config = ConfigDict(frozen=True)


class MergeResult(BaseModel):
    """Outcome of a two-directory merge run."""

    any_conflicts: bool = False
    copied: int = 0
    merged: int = 0
    skipped: int = 0
    conflicted_paths: list[str] = Field(default_factory=list)
