from typing import Any, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table


# Singleton Console instance
def get_console() -> Console:
    if not hasattr(get_console, "_console"):
        get_console._console = Console(highlight=False)
    return get_console._console


def print_panel(content: str, title: str | None = None, style: str = "bold blue", border_style: str | None = None):
    """Print a styled panel with optional title.

    Args:
        content (str): Text shown inside the panel.
        title (str | None, optional): Panel title. Defaults to None.
        style (str, optional): Style of the content. Defaults to "bold blue".
        border_style (str | None, optional): Style of the border, same as style when None.
    """
    get_console().print(Panel(content, title=title, style=style, border_style=border_style or style))


def build_table(headers: Sequence[str], rows: Sequence[Sequence[Any]], title: str | None = None) -> Table:
    table = Table(title=title)
    for header in headers:
        table.add_column(header)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    return table


def print_table(headers: Sequence[str], rows: Sequence[Sequence[Any]], title: str | None = None):
    """Print rows as a table.

    Args:
        headers (Sequence[str]): Column headers.
        rows (Sequence[Sequence[Any]]): Data rows; cells are converted with str().
        title (str | None, optional): Table title. Defaults to None.
    """
    get_console().print(build_table(headers, rows, title))


def print_error(message: str, title: str = "Error"):
    print_table(["Error"], [[message]], title=title)
