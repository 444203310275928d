from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..analysis import AnalysisResult


SIZE_UNITS = ("B", "KB", "MB", "GB")
LARGE_SIZE = 10 * 1024 * 1024
MEDIUM_SIZE = 1024 * 1024
LOW_USAGE = 5
MAX_CANDIDATES = 5


def format_size(num_bytes: float) -> str:
    size = float(num_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1
    return f"{size:.2f} {SIZE_UNITS[unit_index]}"


def removal_candidates(results: list[AnalysisResult], limit: int = MAX_CANDIDATES) -> list[AnalysisResult]:
    low_usage = [result for result in results if result.usage < LOW_USAGE]
    return sorted(low_usage, key=lambda result: result.total_size, reverse=True)[:limit]


def unused_savings(results: list[AnalysisResult]) -> int:
    return sum(result.total_size for result in results if result.usage == 0)


class ConsoleReporter:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render(self, results: list[AnalysisResult], unresolved: list[str] | None = None) -> None:
        if not results:
            self.console.print("[yellow]No dependencies found to analyze.[/yellow]")
            return

        self.console.print(self._build_table(results))
        self._print_candidates(results)

        savings = unused_savings(results)
        if savings > 0:
            self.console.print(
                f"\n[bold]Unused dependencies:[/bold] [red]{format_size(savings)}[/red] could be freed"
            )
        if unresolved:
            self.console.print(f"\n[dim]Not installed: {', '.join(unresolved)}[/dim]")

    def _build_table(self, results: list[AnalysisResult]) -> Table:
        table = Table(title="Dependency Usage Analysis", box=box.SIMPLE_HEAD)
        table.add_column("Package", style="cyan")
        table.add_column("Usage", justify="right")
        table.add_column("Direct Size", justify="right")
        table.add_column("Removable Size", justify="right")
        table.add_column("Exclusive Deps", justify="right", style="dim")

        for result in sorted(results, key=lambda item: item.usage):
            table.add_row(
                result.name,
                Text(str(result.usage), style=_usage_style(result.usage)),
                format_size(result.direct_size),
                Text(format_size(result.total_size), style=_size_style(result.total_size)),
                f"{len(result.exclusive_dependencies)} deps",
            )
        return table

    def _print_candidates(self, results: list[AnalysisResult]) -> None:
        candidates = removal_candidates(results)
        if not candidates:
            return
        self.console.print("\n[bold]Top removal candidates (least used, most space):[/bold]")
        for index, result in enumerate(candidates, start=1):
            self.console.print(
                f"[yellow]{index}.[/yellow] [cyan]{result.name}[/cyan]: "
                f"[red]{result.usage} imports[/red], could save "
                f"[green]{format_size(result.total_size)}[/green]"
            )


def _usage_style(usage: int) -> str:
    if usage == 0:
        return "red"
    if usage < LOW_USAGE:
        return "yellow"
    return "green"


def _size_style(total_size: int) -> str:
    if total_size > LARGE_SIZE:
        return "red"
    if total_size > MEDIUM_SIZE:
        return "yellow"
    return "green"
