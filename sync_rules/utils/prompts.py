"""Interactive prompts used while deciding what to do with a file."""

from typing import Protocol, Sequence, TypeVar

import typer

from sync_rules.utils.rich_console import get_console

T = TypeVar("T")


class Prompter(Protocol):
    """Anything that can ask the user to pick an option or confirm."""

    def select(self, question: str, options: Sequence[tuple[str, T]]) -> T: ...

    def confirm(self, question: str) -> bool: ...


class ConsolePrompter:
    """Prompter backed by the terminal."""

    def select(self, question: str, options: Sequence[tuple[str, T]]) -> T:
        if not options:
            raise ValueError("select() needs at least one option")
        console = get_console()
        console.print(f"\n[bold]{question}[/bold]")
        for index, (label, _) in enumerate(options, start=1):
            console.print(f"  {index}. {label}")

        while True:
            answer = typer.prompt(f"Select an option (1-{len(options)})")
            try:
                choice = int(answer.strip())
            except ValueError:
                choice = 0
            if 1 <= choice <= len(options):
                return options[choice - 1][1]
            console.print(f"Invalid choice. Please enter a number between 1 and {len(options)}.", style="yellow")

    def confirm(self, question: str) -> bool:
        return typer.confirm(question, default=False)
