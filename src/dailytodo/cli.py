"""Command-line interface for daily-todo."""

import logging
import uuid
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from dailytodo.dids.aggregator import DidAggregator
from dailytodo.errors import DailyTodoError
from dailytodo.extraction.git_source import GitCommitSource
from dailytodo.models import PRIORITY_LABELS, DidKind, RepositoryConfig, Settings
from dailytodo.storage.todo_store import TodoStore
from dailytodo.todos.operations import add_todo, get_stats, sort_for_display

app = typer.Typer(
    name="todo",
    help="Daily Todo - a terminal todo list that resets every day, with a DIDs feed of finished work",
    add_completion=False,
)
repo_app = typer.Typer(help="Manage repositories scanned for the DIDs feed", no_args_is_help=True)
config_app = typer.Typer(help="Manage settings stored in the todo file", no_args_is_help=True)
app.add_typer(repo_app, name="repo")
app.add_typer(config_app, name="config")

console = Console()

ADD_USAGE = 'Usage: todo add "task description" [priority] [--persistent]'


def get_settings() -> Settings:
    return Settings()


def get_store(settings: Settings) -> TodoStore:
    return TodoStore(settings.todo_file)


def get_aggregator(settings: Settings, git_author: Optional[str] = None) -> DidAggregator:
    source = GitCommitSource(git_author=git_author, timeout=settings.git_timeout)
    return DidAggregator(
        source,
        days=settings.lookback_days,
        week_start=settings.week_start_day,
        cwd_fallback=settings.cwd_fallback,
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


def launch_tui() -> None:
    from dailytodo.tui import run_tui

    settings = get_settings()
    run_tui(get_store(settings), get_aggregator(settings))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Run without a command to start the interactive interface."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)
    if ctx.invoked_subcommand is None:
        launch_tui()


@app.command()
def add(
    task: Optional[str] = typer.Argument(None, help="Task description; #hashtags become tags"),
    priority: str = typer.Argument("medium", help="high, medium or low"),
    persistent: bool = typer.Option(False, "--persistent", "-p", help="Keep across the daily reset"),
) -> None:
    """Add a todo."""
    if not task:
        console.print(ADD_USAGE)
        return

    store = get_store(get_settings())
    try:
        add_todo(store, store.load().todos, task, priority, persistent)
    except DailyTodoError as e:
        fail(e)

    console.print(f"[bold green]✓[/bold green] Added: {escape(task)}")


app.command(name="a", hidden=True)(add)


@app.command()
def tui() -> None:
    """Start the interactive interface."""
    launch_tui()


app.command(name="ui", hidden=True)(tui)


@app.command(name="list")
def list_todos() -> None:
    """List today's todos."""
    store = get_store(get_settings())
    try:
        todos = store.load().todos
    except DailyTodoError as e:
        fail(e)

    if not todos:
        console.print("[dim]No todos found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("", width=1)
    table.add_column("Task", style="white")
    table.add_column("Priority")
    table.add_column("Persistent", justify="center")

    for todo in sort_for_display(todos):
        table.add_row(
            str(todo.id),
            "[green]✓[/green]" if todo.completed else "○",
            escape(todo.task),
            PRIORITY_LABELS[todo.priority],
            "⬡" if todo.persistent else "",
        )

    console.print(table)


@app.command()
def dids(
    days: Optional[int] = typer.Option(None, "--days", "-d", min=1, help="Days of git history to include"),
) -> None:
    """Show finished todos and recent commits grouped by date."""
    settings = get_settings()
    store = get_store(settings)
    try:
        document = store.load()
    except DailyTodoError as e:
        fail(e)

    aggregator = get_aggregator(settings, document.config.git_author)
    if days is not None:
        aggregator.days = days

    groups = aggregator.build_grouped(document.todos, document.repositories)
    if not groups:
        console.print("[dim]No completed items found![/dim]")
        return

    for category, items in groups.items():
        console.print(f"\n[bold cyan]{category.label}[/bold cyan]")
        for did in items:
            line = f"  {'✓' if did.kind is DidKind.TODO else '•'} {escape(did.title)}"
            if did.description:
                line += f" [dim]{escape(did.description)}[/dim]"
            if did.metadata.hash:
                line += f" [dim]{did.metadata.hash}[/dim]"
            console.print(line)


@app.command()
def stats() -> None:
    """Show todo statistics."""
    store = get_store(get_settings())
    try:
        todos = store.load().todos
    except DailyTodoError as e:
        fail(e)

    result = get_stats(todos)
    console.print("[bold]Statistics[/bold]")
    console.print(f"[cyan]Total:[/cyan] {result.total}")
    console.print(f"[cyan]Completed:[/cyan] {result.completed}")
    console.print(f"[cyan]Pending:[/cyan] {result.pending}")
    console.print(f"[cyan]High priority:[/cyan] {result.high}")
    console.print(f"[cyan]Persistent:[/cyan] {result.persistent}")
    console.print(f"[cyan]Completion rate:[/cyan] {result.completion_rate}%")


@app.command()
def version() -> None:
    """Show version information."""
    from dailytodo import __version__

    console.print(f"[bold]daily-todo[/bold] version {__version__}")


@repo_app.command(name="add")
def repo_add(
    path: Path = typer.Argument(..., help="Path to a git repository"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Display name (defaults to the directory name)"),
) -> None:
    """Add a repository to the DIDs feed."""
    repo_path = str(path.expanduser().resolve())
    store = get_store(get_settings())
    try:
        with store.transaction() as document:
            if any(repo.path == repo_path for repo in document.repositories):
                raise typer.BadParameter(f"Repository already configured: {repo_path}")
            repository = RepositoryConfig(id=uuid.uuid4().hex[:8], path=repo_path, name=name or path.resolve().name)
            document.repositories.append(repository)
    except DailyTodoError as e:
        fail(e)

    console.print(f"[bold green]✓[/bold green] Added repository {repository.name} ({repo_path})")


@repo_app.command(name="list")
def repo_list() -> None:
    """List configured repositories."""
    store = get_store(get_settings())
    try:
        repositories = store.load().repositories
    except DailyTodoError as e:
        fail(e)

    if not repositories:
        console.print("[dim]No repositories configured; the current directory is used.[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Path", style="white")
    table.add_column("Enabled", justify="center")
    for repo in repositories:
        table.add_row(repo.name, repo.path, "[green]yes[/green]" if repo.enabled else "[dim]no[/dim]")
    console.print(table)


def _select_repositories(repositories: List[RepositoryConfig], key: str) -> List[RepositoryConfig]:
    matches = [repo for repo in repositories if key in (repo.name, repo.path, repo.id)]
    if not matches:
        raise typer.BadParameter(f"No repository named {key}")
    return matches


def _set_enabled(key: str, enabled: bool) -> None:
    store = get_store(get_settings())
    try:
        with store.transaction() as document:
            for repo in _select_repositories(document.repositories, key):
                repo.enabled = enabled
    except DailyTodoError as e:
        fail(e)
    console.print(f"[bold green]✓[/bold green] {'Enabled' if enabled else 'Disabled'} {key}")


@repo_app.command(name="enable")
def repo_enable(key: str = typer.Argument(..., help="Repository name, path or id")) -> None:
    """Include a repository in the DIDs feed."""
    _set_enabled(key, True)


@repo_app.command(name="disable")
def repo_disable(key: str = typer.Argument(..., help="Repository name, path or id")) -> None:
    """Exclude a repository from the DIDs feed without removing it."""
    _set_enabled(key, False)


@repo_app.command(name="remove")
def repo_remove(key: str = typer.Argument(..., help="Repository name, path or id")) -> None:
    """Remove a repository."""
    store = get_store(get_settings())
    try:
        with store.transaction() as document:
            removed = _select_repositories(document.repositories, key)
            document.repositories = [repo for repo in document.repositories if repo not in removed]
    except DailyTodoError as e:
        fail(e)
    console.print(f"[bold green]✓[/bold green] Removed {key}")


@config_app.command(name="author")
def config_author(
    name: Optional[str] = typer.Argument(None, help="Author name used to filter commits"),
    clear: bool = typer.Option(False, "--clear", help="Fall back to git's user.name"),
) -> None:
    """Show or set the commit author filter."""
    store = get_store(get_settings())
    try:
        if name is None and not clear:
            current = store.load().config.git_author
            console.print(current or "[dim]not set (using git user.name)[/dim]")
            return
        with store.transaction() as document:
            document.config.git_author = None if clear else name
    except DailyTodoError as e:
        fail(e)
    console.print(f"[bold green]✓[/bold green] Author filter {'cleared' if clear else f'set to {name}'}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
