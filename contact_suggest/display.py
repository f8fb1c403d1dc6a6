"""Rich terminal output for suggestions and cache statistics."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from .cache_store import CacheStats
from .models import ContactSource, SuggestionView

console = Console()


def display_suggestions(query: str, views: list[SuggestionView]) -> None:
    """Print ranked suggestions for *query* as a table."""
    console.print()
    if not views:
        console.print(f"[yellow]No suggestions for {query!r}.[/yellow]")
        return

    table = Table(title=f"Suggestions for {query!r}", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("", style="bold cyan")
    table.add_column("Contact")
    table.add_column("Domain", style="dim")

    for i, view in enumerate(views, start=1):
        table.add_row(str(i), view.initials, view.display_name, view.domain)

    console.print(table)


def display_stats(stats: CacheStats) -> None:
    """Print a summary of the suggestion cache."""
    console.print()
    console.rule("[bold]Suggestion Cache[/bold]")
    console.print()

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(justify="right")

    table.add_row("Entries:", str(stats.entries))
    table.add_row("Generation:", str(stats.generation))
    rebuilt = stats.last_rebuild.isoformat(timespec="seconds") if stats.last_rebuild else "never"
    table.add_row("Last rebuild:", f"[dim]{rebuilt}[/dim]")
    for source in ContactSource:
        count = stats.by_source.get(source.value, 0)
        if count:
            table.add_row(f"  {source.value}:", str(count))

    console.print(table)
