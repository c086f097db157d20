"""Keyboard-driven terminal interface for daily-todo.

``TodoController`` owns what the screen shows and reacts to single key
presses, named the way textual names them ("up", "escape", "delete", ...) or
given as the printable character. ``DailyTodoApp`` is the textual application
that forwards every key press to the controller and redraws its output.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, Union

from rich.console import Group, RenderableType
from rich.rule import Rule
from rich.table import Table
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Static

from dailytodo.dids.aggregator import DidAggregator
from dailytodo.errors import DailyTodoError, EmptyTaskError
from dailytodo.models.did import DidItem, DidKind
from dailytodo.models.todo import PRIORITY_LABELS, AppConfig, RepositoryConfig, Todo
from dailytodo.storage.todo_store import TodoStore
from dailytodo.todos.operations import (
    VIEWS,
    add_todo,
    filter_todos,
    get_stats,
    remove_todo,
    sort_for_display,
    toggle_complete,
)

logger = logging.getLogger(__name__)

ENTER = "enter"
ESCAPE = "escape"

QUIT_KEYS = ("q", "Q", ESCAPE)
TOGGLE_KEYS = (" ", ENTER)
DELETE_KEYS = ("d", "D", "delete")

PRIORITY_COLORS = {"high": "red", "medium": "yellow", "low": "blue"}

# Shortcuts accepted by the add form
PRIORITY_SHORTCUTS = {"1": "high", "h": "high", "2": "medium", "m": "medium", "3": "low", "l": "low"}

# Order walked by the arrow keys in the add form
PRIORITY_STEPS = ("low", "medium", "high")

HELP_LINES = [
    "Navigation: ↑/k ↓/j Move • g/G First/Last • Tab/t Switch tabs",
    "TODOs: Enter/Space Toggle • a/n Add • d/Del Delete • v Views • 1/2/3 Quick View",
    "Info: s/i Stats • h/? Help • q/Esc Quit",
    "Tips: use #tags for organization • persistent todos survive the daily reset",
    "DIDs show completed todos and recent git commits",
]


@dataclass
class AddForm:
    """Fields of the todo being added; ``field`` is the one taking input."""

    task: str = ""
    priority: str = "medium"
    persistent: bool = False
    field: str = "task"


@dataclass
class AppState:
    """Everything the screen shows."""

    todos: List[Todo] = field(default_factory=list)
    selected_index: int = 0
    view: str = "all"
    tab: str = "todos"
    form: Optional[AddForm] = None
    show_help: bool = False
    show_stats: bool = False
    error: Optional[str] = None
    dids: List[DidItem] = field(default_factory=list)
    repositories: List[RepositoryConfig] = field(default_factory=list)
    config: AppConfig = field(default_factory=AppConfig)

    @property
    def show_add_form(self) -> bool:
        return self.form is not None


class TodoController:
    """Key handling and rendering for the interactive interface."""

    def __init__(
        self,
        store: TodoStore,
        aggregator: DidAggregator,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.clock = clock or store.now
        self.state = AppState()

    # -------------------- state --------------------
    def start(self) -> None:
        """Load the document; a failure leaves an empty list and an error."""
        try:
            document = self.store.load()
        except DailyTodoError as e:
            self.state.error = f"Failed to load todos: {e}"
            return
        self.state.todos = document.todos
        self.state.repositories = document.repositories
        self.state.config = document.config
        self.state.error = None

    @property
    def visible_todos(self) -> List[Todo]:
        return sort_for_display(filter_todos(self.state.todos, self.state.view))

    @property
    def current_items(self) -> Union[List[Todo], List[DidItem]]:
        return self.visible_todos if self.state.tab == "todos" else self.state.dids

    def selected_todo(self) -> Optional[Todo]:
        todos = self.visible_todos
        if self.state.tab == "todos" and 0 <= self.state.selected_index < len(todos):
            return todos[self.state.selected_index]
        return None

    def refresh_dids(self) -> None:
        """Rebuild the DIDs feed from the document as it is now on disk.

        Repositories and the author filter are re-read so changes made with
        the command line while the interface runs are picked up.
        """
        try:
            document = self.store.load()
            self.state.todos = document.todos
            self.state.repositories = document.repositories
            self.state.config = document.config
            self.aggregator.use_author(document.config.git_author)
            self.state.dids = self.aggregator.build(self.state.todos, self.state.repositories)
        except DailyTodoError as e:
            self.state.error = f"Failed to load DIDs: {e}"

    def _set_todos(self, todos: List[Todo]) -> None:
        self.state.todos = todos
        if self.state.tab == "dids":
            self.refresh_dids()
        self._clamp_selection()

    def _clamp_selection(self) -> None:
        count = len(self.current_items)
        if self.state.selected_index >= count:
            self.state.selected_index = max(0, count - 1)

    # -------------------- input --------------------
    def press(self, *keys: str) -> bool:
        """Handle several key presses in order. Returns False once one quits."""
        return all(self.handle_key(key) for key in keys)

    def handle_key(self, key: str) -> bool:
        """Handle a single key press. Returns False when the app should quit."""
        state = self.state
        state.error = None

        if state.form is not None:
            self._handle_form_key(state.form, key)
            return True

        if key in ("t", "T", "tab"):
            state.tab = "dids" if state.tab == "todos" else "todos"
            state.selected_index = 0
            if state.tab == "dids":
                self.refresh_dids()
        elif key in ("k", "up"):
            state.selected_index = max(0, state.selected_index - 1)
        elif key in ("j", "down"):
            state.selected_index = min(max(0, len(self.current_items) - 1), state.selected_index + 1)
        elif key == "g":
            state.selected_index = 0
        elif key == "G":
            state.selected_index = max(0, len(self.current_items) - 1)
        elif key in TOGGLE_KEYS and self.selected_todo() is not None:
            self._run(lambda: toggle_complete(self.store, state.todos, self.selected_todo().id), "toggle")
        elif key in DELETE_KEYS and self.selected_todo() is not None:
            self._run(lambda: remove_todo(self.store, state.todos, self.selected_todo().id), "delete")
        elif key in ("a", "A", "n"):
            state.form = AddForm()
            state.show_help = False
            state.show_stats = False
        elif state.tab == "todos" and key in ("v", "V"):
            state.view = VIEWS[(VIEWS.index(state.view) + 1) % len(VIEWS)]
            state.selected_index = 0
        elif state.tab == "todos" and key in ("1", "2", "3"):
            state.view = VIEWS[int(key) - 1]
            state.selected_index = 0
        elif key in ("h", "H", "?"):
            state.show_help = not state.show_help
            state.show_stats = False
        elif key in ("s", "S", "i"):
            state.show_stats = not state.show_stats
            state.show_help = False
        elif key in QUIT_KEYS:
            return False
        return True

    def _handle_form_key(self, form: AddForm, key: str) -> None:
        if key == ENTER:
            if form.field == "task":
                if not form.task.strip():
                    self.state.error = str(EmptyTaskError())
                    return
                form.field = "priority"
            elif form.field == "priority":
                form.field = "persistent"
            else:
                self.add(form.task, form.priority, form.persistent)
        elif key == ESCAPE:
            self.cancel_add()
        elif form.field == "task":
            if key in ("backspace", "delete"):
                form.task = form.task[:-1]
            elif len(key) == 1 and key.isprintable():
                form.task += key
        elif form.field == "priority":
            step = PRIORITY_STEPS.index(form.priority)
            if key.lower() in PRIORITY_SHORTCUTS:
                form.priority = PRIORITY_SHORTCUTS[key.lower()]
            elif key == "up":
                form.priority = PRIORITY_STEPS[min(step + 1, len(PRIORITY_STEPS) - 1)]
            elif key == "down":
                form.priority = PRIORITY_STEPS[max(step - 1, 0)]
        elif key in ("y", "Y", "right"):
            form.persistent = True
        elif key in ("n", "N", "left"):
            form.persistent = False

    def add(self, task: str, priority: str, persistent: bool) -> bool:
        """Submit the add form. Returns True if the todo was added."""
        self.state.form = None
        priority = PRIORITY_SHORTCUTS.get(priority.strip().lower(), priority.strip().lower())
        return self._run(lambda: add_todo(self.store, self.state.todos, task, priority, persistent), "add")

    def cancel_add(self) -> None:
        self.state.form = None
        self.state.error = None

    def _run(self, operation: Callable[[], List[Todo]], action: str) -> bool:
        try:
            todos = operation()
        except DailyTodoError as e:
            logger.debug(f"Failed to {action} todo: {e}")
            self.state.error = f"Failed to {action} todo: {e}"
            return False
        self._set_todos(todos)
        return True

    # -------------------- rendering --------------------
    def render(self) -> RenderableType:
        state = self.state
        parts: List[RenderableType] = [self._render_header(), self._render_tabs()]

        if state.error:
            parts.append(Text(state.error, style="bold red"))

        if state.form is not None:
            parts.append(self._render_add_form(state.form))
        elif state.tab == "todos":
            parts.append(self._render_todos())
        else:
            parts.append(self._render_dids())

        if state.show_help:
            parts.append(self._render_help())
        if state.show_stats:
            parts.append(self._render_stats())

        parts.append(self._render_status())
        return Group(*parts)

    def _render_header(self) -> RenderableType:
        header = Table.grid(expand=True)
        header.add_column()
        header.add_column(justify="right")
        header.add_row(
            Text("Daily Todo", style="bold bright_blue"),
            Text(self.clock().strftime("%a %b %d %Y"), style="magenta"),
        )
        return Group(header, Rule(style="magenta"))

    def _render_tabs(self) -> RenderableType:
        tabs = Text()
        for name, label, count in (
            ("todos", "TODOs", len(self.state.todos)),
            ("dids", "DIDs", len(self.state.dids)),
        ):
            style = "bold bright_blue reverse" if self.state.tab == name else "magenta"
            tabs.append(f" {label} ({count}) ", style=style)
            tabs.append("  ")
        return tabs

    def _render_add_form(self, form: AddForm) -> RenderableType:
        def label(name: str, text: str) -> Text:
            return Text(text, style="bright_blue" if form.field == name else "magenta")

        task = label("task", "Task: ")
        task.append(form.task, style="bright_white")
        if form.field == "task":
            task.append("█", style="bright_blue")
        priority = label("priority", "Priority: ")
        priority.append(f"{PRIORITY_LABELS[form.priority]} ", style="bright_white")
        priority.append("(1/h:high, 2/m:medium, 3/l:low)", style="dim")
        persistent = label("persistent", "Persistent: ")
        persistent.append("Yes " if form.persistent else "No ", style="bright_white")
        persistent.append("(y/n)", style="dim")
        return Group(
            Text("Add New Todo", style="bold bright_green"),
            task,
            priority,
            persistent,
            Text("Enter to continue • Esc to cancel", style="dim"),
        )

    def _render_todos(self) -> RenderableType:
        todos = self.visible_todos
        if not todos:
            return Text("No todos found. Press 'a' to add one!", style="magenta")

        table = Table.grid(expand=True, padding=(0, 1))
        table.add_column(width=1)
        table.add_column(width=1)
        table.add_column(ratio=1)
        table.add_column(justify="right")
        for index, todo in enumerate(todos):
            task = Text(todo.task, style="dim strike" if todo.completed else "bright_white")
            badge = Text(PRIORITY_LABELS[todo.priority], style=f"dim {PRIORITY_COLORS[todo.priority]}")
            if todo.persistent:
                badge.append(" ⬡", style="bright_yellow")
            table.add_row(
                Text("▶" if index == self.state.selected_index else " ", style="bright_blue"),
                Text("✓", style="bright_green") if todo.completed else Text("○", style="magenta"),
                task,
                badge,
            )
        return table

    def _render_dids(self) -> RenderableType:
        if not self.state.dids:
            return Text("No completed items found!", style="magenta")

        selected = self.state.dids[self.state.selected_index] if self.state.dids else None
        parts: List[RenderableType] = []
        for category, items in self.aggregator.group(self.state.dids, now=self.clock()).items():
            parts.append(Rule(Text(category.label, style="bold bright_cyan"), style="magenta", align="left"))
            table = Table.grid(expand=True, padding=(0, 1))
            table.add_column(width=1)
            table.add_column(width=1)
            table.add_column(ratio=1)
            table.add_column(justify="right")
            for did in items:
                title = Text(did.title, style="bright_white")
                if did.description:
                    title.append(f" {did.description}", style="dim magenta")
                details = Text(did.completed_at.strftime("%Y-%m-%d"), style="dim")
                if did.metadata.priority:
                    details.append(
                        f" {PRIORITY_LABELS[did.metadata.priority]}",
                        style=f"dim {PRIORITY_COLORS[did.metadata.priority]}",
                    )
                if did.metadata.repository:
                    details.append(f" [{did.metadata.repository.name}]", style="dim bright_cyan")
                if did.metadata.hash:
                    details.append(f" {did.metadata.hash}", style="dim")
                table.add_row(
                    Text("▶" if did is selected else " ", style="bright_blue"),
                    Text("✓", style="bright_green") if did.kind is DidKind.TODO else Text(""),
                    title,
                    details,
                )
            parts.append(table)
        return Group(*parts)

    def _render_help(self) -> RenderableType:
        lines = [Text("Keyboard Shortcuts", style="bold bright_blue")]
        lines.extend(Text(line, style="magenta") for line in HELP_LINES)
        return Group(*lines)

    def _render_stats(self) -> RenderableType:
        stats = get_stats(self.state.todos)
        return Group(
            Text("Statistics", style="bold bright_blue"),
            Text.assemble(
                ("Total: ", "magenta"), str(stats.total),
                (" • Completed: ", "magenta"), (str(stats.completed), "bright_green"),
                (" • Pending: ", "magenta"), (str(stats.pending), "bright_yellow"),
            ),
            Text.assemble(
                ("High priority: ", "magenta"), (str(stats.high), "bright_red"),
                (" • Persistent: ", "magenta"), (str(stats.persistent), "bright_cyan"),
            ),
            Text.assemble(("Completion rate: ", "magenta"), (f"{stats.completion_rate}%", "bright_blue")),
        )

    def _render_status(self) -> RenderableType:
        stats = get_stats(self.state.todos)
        line = Table.grid(expand=True)
        line.add_column()
        line.add_column(justify="right")
        summary = Text.assemble(
            (f"{stats.completed} done", "bright_green"),
            (" • ", "magenta"),
            (f"{stats.pending} pending", "bright_yellow"),
        )
        if stats.high:
            summary.append(" • ", style="magenta")
            summary.append(f"{stats.high} urgent", style="bright_red")
        line.add_row(summary, Text(self.state.view, style="bright_cyan"))
        return Group(Rule(style="magenta"), line)


class TodoView(Static, can_focus=True):
    """Shows the controller's output and hands it every key press."""

    def __init__(self, controller: TodoController) -> None:
        super().__init__(id="todo-view")
        self.controller = controller

    def on_mount(self) -> None:
        self.focus()
        self.refresh_view()

    def refresh_view(self) -> None:
        self.update(self.controller.render())

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        key = event.character if event.is_printable else event.key
        if not self.controller.handle_key(key):
            self.app.exit()
            return
        self.refresh_view()


class DailyTodoApp(App):
    """Full-screen daily-todo interface."""

    TITLE = "Daily Todo"

    CSS = """
    #todo-view {
        padding: 0 1;
    }
    """

    def __init__(self, controller: TodoController) -> None:
        super().__init__()
        self.controller = controller

    def compose(self) -> ComposeResult:
        yield TodoView(self.controller)


def run_tui(store: TodoStore, aggregator: DidAggregator) -> None:
    controller = TodoController(store, aggregator)
    controller.start()
    DailyTodoApp(controller).run()
