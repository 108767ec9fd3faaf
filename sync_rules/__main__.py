"""Allows ``python -m sync_rules``."""

from sync_rules.cli import cli


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
