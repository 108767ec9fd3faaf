"""
Error Types
===========

Exception hierarchy for sync-rules. Per-file and per-project errors are
absorbed by the component that detects them; the rest propagate to the CLI.
"""

from pathlib import Path


class SyncRulesError(Exception):
    """Base exception for sync-rules."""

    pass


class ScanError(SyncRulesError):
    """Raised when a project directory cannot be scanned."""

    def __init__(self, message: str, project_dir: str | Path | None = None):
        super().__init__(message)
        self.project_dir = project_dir


class NoProjectsScannedError(ScanError):
    """Raised when every project in a run failed to scan."""

    pass


class HashError(SyncRulesError):
    """Raised when a single file cannot be hashed."""

    def __init__(self, message: str, path: str | Path | None = None):
        super().__init__(message)
        self.path = path


class DecisionError(SyncRulesError):
    """Raised when no decision strategy matched a file state."""

    pass


class ActionExecutionError(SyncRulesError):
    """Raised when a single sync action cannot be applied."""

    def __init__(self, message: str, relative_path: str | None = None, action_type: str | None = None):
        super().__init__(message)
        self.relative_path = relative_path
        self.action_type = action_type


class ExternalToolUnavailableError(SyncRulesError):
    """Raised when the merge tool or the interactive editor is missing."""

    def __init__(self, tool: str, relative_path: str | None = None):
        message = f'"{tool}" is not available on PATH'
        if relative_path:
            message += f"; cannot merge {relative_path}"
        super().__init__(message)
        self.tool = tool
        self.relative_path = relative_path


class PathGuardError(SyncRulesError):
    """Raised when a path falls outside the allowed project roots."""

    pass


class DiscoveryError(SyncRulesError):
    """Raised when projects cannot be discovered or validated."""

    pass


class DuplicateProjectError(DiscoveryError):
    """Raised when two projects share a display name."""

    def __init__(self, name: str, first: str | Path, second: str | Path):
        super().__init__(f'Duplicate project name "{name}" found at both "{first}" and "{second}"')
        self.name = name


class ConfigError(SyncRulesError):
    """Base exception for configuration errors."""

    pass


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested config file does not exist."""

    def __init__(self, path: str | Path):
        super().__init__(f"Config file not found at {path}")
        self.path = path


class ConfigParseError(ConfigError):
    """Raised when a config file is not valid JSON or fails validation."""

    def __init__(self, path: str | Path, reason: str):
        super().__init__(f"Failed to load config from {path}: {reason}")
        self.path = path
