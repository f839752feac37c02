"""Rich terminal display helpers for CLI output."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from testgen.models import GenerationResult, OllamaModel

_console = Console()


def display_generated_tests(
    result: GenerationResult, console: Console | None = None
) -> None:
    """Print generated test code with syntax highlighting and a summary.

    Args:
        result: Generation result to render.
        console: Optional console override for tests.
    """
    c = console or _console
    syntax = Syntax(result.test_code, result.language.value, line_numbers=False)
    title = f"Generated {result.framework.value} tests"
    c.print(Panel(syntax, title=title, border_style="cyan"))
    model_name = escape(result.model_name)
    c.print(
        f"[green]{result.test_count} test(s)[/green] from [bold]{model_name}[/bold] "
        f"in {result.execution_time_ms} ms"
    )


def display_models_table(
    models: list[OllamaModel], console: Console | None = None
) -> None:
    """Print a table of models installed on the Ollama host.

    Args:
        models: Installed models.
        console: Optional console override for tests.
    """
    c = console or _console
    if not models:
        c.print("[yellow]No models installed. Pull one with `ollama pull codellama`.[/yellow]")
        return
    table = Table(title="Ollama Models")
    table.add_column("Name")
    table.add_column("Size (MB)", justify="right")
    table.add_column("Modified")
    for model in models:
        table.add_row(
            escape(model.name), f"{model.size / 1_000_000:.1f}", escape(model.modified_at)
        )
    c.print(table)


def display_health(ollama_healthy: bool, base_url: str, console: Console | None = None) -> None:
    """Print whether the Ollama host answered.

    Args:
        ollama_healthy: Result of the health check.
        base_url: Ollama base URL that was checked.
        console: Optional console override for tests.
    """
    c = console or _console
    if ollama_healthy:
        c.print(f"[green]Ollama is healthy at {escape(base_url)}[/green]")
    else:
        c.print(f"[red]Ollama is unreachable at {escape(base_url)}[/red]")


def display_error(message: str, console: Console | None = None) -> None:
    """Print an error message in red.

    Args:
        message: Error message to display.
        console: Optional console override for tests.
    """
    c = console or _console
    c.print(f"[red]Error: {escape(message)}[/red]")


def display_spinner_context(message: str):
    """Return a spinner context manager for status output.

    Args:
        message: Status message shown while work is in progress.

    Returns:
        Rich status context manager.
    """
    return _console.status(message)
