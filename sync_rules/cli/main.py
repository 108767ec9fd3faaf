"""
Main CLI entry point for sync-rules.
"""

import asyncio
import importlib.metadata
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger

from sync_rules.config import SyncConfig, load_config
from sync_rules.core.discovery import discover_projects, projects_from_paths
from sync_rules.core.merge import MergeResolver, ToolAvailability
from sync_rules.core.models import ProjectInfo
from sync_rules.core.reporting import print_merge_result, print_projects, print_sync_summary
from sync_rules.core.scanner import scan
from sync_rules.errors import ExternalToolUnavailableError, SyncRulesError
from sync_rules.sync.multi_sync import MultiSyncOptions, run_multi_sync
from sync_rules.utils.logging import configure_logging
from sync_rules.utils.rich_console import get_console, print_error

console = get_console()

app = typer.Typer(
    help="sync-rules - keep AI assistant rule files consistent across projects.",
    no_args_is_help=True,
)


def _load_config_or_exit(config_path: Optional[Path]) -> SyncConfig:
    try:
        return load_config(config_path)
    except SyncRulesError as error:
        print_error(str(error), title="Config Error")
        raise typer.Exit(1)


def resolve_projects(project_dirs: List[Path], config: SyncConfig, base_dir: Optional[Path]) -> list[ProjectInfo]:
    """Explicit directories win, then configured projects, then discovery under the base directory."""
    if project_dirs:
        return projects_from_paths(project_dirs)
    if config.projects:
        return projects_from_paths(config.projects)
    return discover_projects(base_dir or config.base_dir, config.rules, config.exclude)


@app.command()
def sync(
    project_dirs: List[Path] = typer.Argument(None, help="Project directories to synchronize"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to the JSON config file"),
    base_dir: Optional[Path] = typer.Option(None, "--base-dir", "-b", help="Directory to discover projects in"),
    rules: List[str] = typer.Option(None, "--rule", "-r", help="Rule name or glob (repeatable)"),
    exclude: List[str] = typer.Option(None, "--exclude", "-e", help="Name or glob to skip (repeatable)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would change without writing"),
    auto_confirm: bool = typer.Option(False, "--auto-confirm", "-y", help="Use the newest version without prompting"),
    manifest_file: Optional[str] = typer.Option(None, "--manifest-file", help="Per-project manifest limiting additions"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Synchronize rule files across multiple projects."""
    configure_logging(verbose)
    config = _load_config_or_exit(config_path)

    try:
        projects = resolve_projects(project_dirs or [], config, base_dir)
    except SyncRulesError as error:
        print_error(str(error), title="Discovery Error")
        raise typer.Exit(1)

    if not projects:
        console.print("No projects found; nothing to do.", style="yellow")
        return
    print_projects(projects, title=f"Synchronizing {len(projects)} project(s)")

    options = MultiSyncOptions(
        rule_patterns=rules or config.rules,
        exclude_patterns=exclude or config.exclude,
        dry_run=dry_run,
        auto_confirm=auto_confirm,
        manifest_file=manifest_file or config.manifest_file,
        max_file_size=config.max_file_size,
    )
    try:
        summary = asyncio.run(run_multi_sync(projects, options))
    except SyncRulesError as error:
        print_error(str(error), title="Sync Error")
        raise typer.Exit(1)

    print_sync_summary(summary, dry_run=dry_run)
    if summary.has_conflicts:
        raise typer.Exit(1)


@app.command()
def merge(
    source: Path = typer.Argument(..., help="Directory to take rule files from"),
    target: Path = typer.Argument(..., help="Directory to bring up to date"),
    rules: List[str] = typer.Option(None, "--rule", "-r", help="Rule name or glob (repeatable)"),
    exclude: List[str] = typer.Option(None, "--exclude", "-e", help="Name or glob to skip (repeatable)"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Show what would change without writing"),
    editor: Optional[str] = typer.Option(None, "--editor", help="Editor opened for conflicting merges"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to the JSON config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Merge rule files from SOURCE into TARGET using git merge-file."""
    configure_logging(verbose)
    config = _load_config_or_exit(config_path)
    rule_patterns = rules or config.rules
    exclude_patterns = exclude or config.exclude
    tools = ToolAvailability(merge_tool=config.merge_tool, editor=editor or config.editor)

    try:
        source_files = scan(source, rule_patterns, exclude_patterns, config.max_file_size)
        target_files = scan(target, rule_patterns, exclude_patterns, config.max_file_size)
        resolver = MergeResolver(source, target, dry_run=dry_run, tools=tools)
        result = resolver.resolve(source_files, target_files)
    except ExternalToolUnavailableError as error:
        print_error(str(error), title="Missing Tool")
        raise typer.Exit(1)
    except SyncRulesError as error:
        print_error(str(error), title="Merge Error")
        raise typer.Exit(1)

    print_merge_result(result, dry_run=dry_run)
    if result.any_conflicts:
        logger.warning("Synchronization finished with conflicts.")
        raise typer.Exit(1)


@app.command()
def discover(
    base_dir: Optional[Path] = typer.Option(None, "--base-dir", "-b", help="Directory to discover projects in"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to the JSON config file"),
):
    """List the projects that contain rule files."""
    configure_logging()
    config = _load_config_or_exit(config_path)
    try:
        projects = discover_projects(base_dir or config.base_dir, config.rules, config.exclude)
    except SyncRulesError as error:
        print_error(str(error), title="Discovery Error")
        raise typer.Exit(1)
    print_projects(projects, title="Discovered Projects")


@app.command()
def version():
    """Show the sync-rules version."""
    typer.echo(f"sync-rules version: {importlib.metadata.version('sync-rules')}")
