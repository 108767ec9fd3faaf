"""Command line interface: ``sync``, ``merge``, ``discover`` and ``version``."""

from sync_rules.cli.main import app


def cli():
    """Run the sync-rules Typer app; installed as the ``sync-rules`` script."""
    app()


__all__ = ["app", "cli"]
