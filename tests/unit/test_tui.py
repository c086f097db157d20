"""Unit tests for the interactive interface's key handling and rendering."""

import asyncio
import io
import json
import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console

from dailytodo.dids import DidAggregator
from dailytodo.models import DidKind, GitCommit, RepositoryConfig, RepositoryRef
from dailytodo.storage import TodoStore
from dailytodo.tui import DailyTodoApp, TodoController

NOW = datetime(2026, 10, 16, 12, 0)


class FakeCommitSource:
    def __init__(self, commits=()):
        self.commits = list(commits)
        self.git_author = None
        self.seen_authors = []

    def get_commits(self, repository, days):
        self.seen_authors.append(self.git_author)
        return list(self.commits)


@pytest.fixture
def temp_dir():
    """Create temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store(temp_dir):
    return TodoStore(temp_dir / "todo.json", clock=lambda: NOW)


@pytest.fixture
def controller(store):
    todo_controller = TodoController(store, DidAggregator(FakeCommitSource(), cwd_fallback=False))
    todo_controller.start()
    return todo_controller


def rendered(controller):
    console = Console(file=io.StringIO(), width=100, color_system=None)
    console.print(controller.render())
    return console.file.getvalue()


def type_text(text):
    return list(text)


def test_start_empty(controller):
    """Test a fresh interface shows the empty state."""
    assert controller.state.todos == []
    assert controller.state.error is None
    assert "No todos found" in rendered(controller)


def test_start_with_corrupt_file(store):
    """Test a load failure becomes an error message instead of a crash."""
    store.path.write_text("{broken", encoding="utf-8")
    controller = TodoController(store, DidAggregator(FakeCommitSource(), cwd_fallback=False))

    controller.start()

    assert controller.state.error.startswith("Failed to load todos")
    assert controller.handle_key("j") is True


def test_add_form_walkthrough(controller):
    """Test typing a task, picking a priority and marking it persistent."""
    controller.press("a")
    assert controller.state.show_add_form is True

    controller.press(*type_text("Write report #work"), "enter", "h", "enter", "y", "enter")

    todo = controller.state.todos[0]
    assert todo.task == "Write report #work"
    assert todo.priority == "high"
    assert todo.persistent is True
    assert todo.tags == ["work"]
    assert controller.state.show_add_form is False


def test_add_form_keys_do_not_trigger_commands(controller):
    """Test letters typed into the task field are text, not shortcuts."""
    controller.press("a", *type_text("quit delete"), "enter", "enter", "enter")

    assert [todo.task for todo in controller.state.todos] == ["quit delete"]


def test_add_form_editing(controller):
    """Test backspace, arrow keys and left/right in the form."""
    controller.press("a", "x", "y", "z", "backspace", "enter")
    form = controller.state.form
    assert form.task == "xy"
    assert form.field == "priority"

    controller.press("up")
    assert form.priority == "high"
    controller.press("up")
    assert form.priority == "high"
    controller.press("down", "down", "down")
    assert form.priority == "low"

    controller.press("enter", "right")
    assert form.persistent is True
    controller.press("left")
    assert form.persistent is False

    controller.press("enter")
    assert controller.state.todos[0].priority == "low"
    assert controller.state.todos[0].persistent is False


def test_add_form_rejects_empty_task(controller):
    """Test Enter on an empty task keeps the form open with an error."""
    controller.press("a", " ", "enter")

    assert controller.state.error == "Task cannot be empty"
    assert controller.state.form.field == "task"
    assert "Add New Todo" in rendered(controller)


def test_add_form_escape_cancels(controller):
    """Test Esc closes the form without adding and without quitting."""
    assert controller.press("a", "x", "escape") is True

    assert controller.state.show_add_form is False
    assert controller.state.todos == []


def test_add_errors_are_shown(controller):
    """Test operation errors become a status message and change nothing."""
    assert controller.add("   ", "medium", False) is False
    assert controller.state.error == "Failed to add todo: Task cannot be empty"

    assert controller.add("Something", "urgent", False) is False
    assert "Invalid priority" in controller.state.error
    assert controller.state.todos == []


def test_error_cleared_on_next_key(controller):
    """Test any key press clears the error line."""
    controller.add("", "medium", False)

    controller.press("j")

    assert controller.state.error is None


def test_enter_and_space_toggle_selected(controller):
    """Test Enter completes and Space un-completes the selected todo."""
    controller.add("Only task", "medium", False)

    controller.press("enter")
    assert controller.state.todos[0].completed is True

    controller.press(" ")
    assert controller.state.todos[0].completed is False


def test_toggle_uses_display_order(controller):
    """Test the selection follows the sorted list, not insertion order."""
    controller.add("Low one", "low", False)
    controller.add("High one", "high", False)

    controller.press("enter")

    completed = [todo.task for todo in controller.state.todos if todo.completed]
    assert completed == ["High one"]


@pytest.mark.parametrize("key", ["d", "delete"])
def test_delete_selected(controller, key):
    """Test d and the Delete key remove the selected todo and clamp the selection."""
    controller.add("First", "medium", False)
    controller.add("Second", "medium", False)

    controller.press("G")
    assert controller.state.selected_index == 1

    controller.press(key)

    assert [todo.task for todo in controller.state.todos] == ["First"]
    assert controller.state.selected_index == 0
    on_disk = json.loads(controller.store.path.read_text(encoding="utf-8"))
    assert [todo["task"] for todo in on_disk["todos"]] == ["First"]


def test_navigation(controller):
    """Test arrows and j/k/g/G stay within bounds."""
    for task in ("A", "B", "C"):
        controller.add(task, "medium", False)

    controller.press("j", "down", "down", "j")
    assert controller.state.selected_index == 2

    controller.press("up")
    assert controller.state.selected_index == 1

    controller.press("g", "k", "up")
    assert controller.state.selected_index == 0


def test_views(controller):
    """Test v cycles views and 1/2/3 pick one."""
    controller.add("Open", "medium", False)
    controller.add("Done", "medium", False)
    controller.press("down", "enter")

    controller.press("v")
    assert controller.state.view == "pending"
    assert [todo.task for todo in controller.visible_todos] == ["Open"]

    controller.press("v")
    assert controller.state.view == "completed"
    assert [todo.task for todo in controller.visible_todos] == ["Done"]

    controller.press("1")
    assert controller.state.view == "all"
    assert len(controller.visible_todos) == 2


def test_dids_tab(store):
    """Test switching to the DIDs tab builds the feed."""
    commit = GitCommit(
        hash="abcd1234",
        message="Fix login",
        author="Jane",
        date="2026-10-16",
        timestamp=datetime(2026, 10, 16, 11, 0).astimezone(),
        repository=RepositoryRef(name="api", path="/work/api"),
    )
    store.path.write_text(
        json.dumps({"todos": [], "lastUpdated": "2026-10-16", "repositories": [{"path": "/work/api", "name": "api"}]}),
        encoding="utf-8",
    )
    controller = TodoController(store, DidAggregator(FakeCommitSource([commit]), cwd_fallback=False))
    controller.start()
    controller.add("Ship it", "high", False)
    controller.press("enter")

    controller.press("tab")

    assert controller.state.tab == "dids"
    assert [did.kind for did in controller.state.dids] == [DidKind.TODO, DidKind.COMMIT]
    output = rendered(controller)
    assert "Today" in output
    assert "Fix login" in output
    assert "[api]" in output

    # Todo actions do nothing on the DIDs tab
    controller.press("d", "delete")
    assert len(controller.state.todos) == 1

    controller.press("t")
    assert controller.state.tab == "todos"


def test_dids_tab_picks_up_saved_configuration(store):
    """Test repositories and the author filter saved while running are used."""
    source = FakeCommitSource()
    controller = TodoController(store, DidAggregator(source, cwd_fallback=False))
    controller.start()

    with store.transaction() as document:
        document.config.git_author = "Jane"
        document.repositories.append(RepositoryConfig(path="/work/api"))

    controller.press("tab")

    assert source.seen_authors == ["Jane"]
    assert [repo.path for repo in controller.state.repositories] == ["/work/api"]
    assert controller.state.config.git_author == "Jane"


def test_help_and_stats_panels(controller):
    """Test the help and stats panels toggle and exclude each other."""
    controller.add("Task", "high", True)

    controller.press("?")
    assert controller.state.show_help is True
    assert "Keyboard Shortcuts" in rendered(controller)

    controller.press("s")
    assert controller.state.show_stats is True
    assert controller.state.show_help is False
    output = rendered(controller)
    assert "Completion rate: 0%" in output
    assert "1 urgent" in output


@pytest.mark.parametrize("key", ["q", "Q", "escape"])
def test_quit(controller, key):
    """Test q and Esc end the interface."""
    assert controller.handle_key(key) is False


def test_press_stops_at_quit(controller):
    """Test keys after a quit are not handled."""
    controller.add("Task", "medium", False)

    assert controller.press("q", "enter") is False
    assert controller.state.todos[0].completed is False


def test_render_todo_list(controller):
    """Test todos render with priority and persistence marker."""
    controller.add("Buy milk #errand", "low", True)

    output = rendered(controller)

    assert "Daily Todo" in output
    assert "Fri Oct 16 2026" in output
    assert "Buy milk #errand" in output
    assert "Low" in output
    assert "⬡" in output
    assert "TODOs (1)" in output


def test_textual_app_forwards_key_presses(controller):
    """Test the full-screen app turns real key presses into controller actions."""

    async def session():
        app = DailyTodoApp(controller)
        async with app.run_test() as pilot:
            await pilot.press("a", "b", "u", "y", "enter", "enter", "enter")
            await pilot.press("down", "enter")
            await pilot.pause()
            await pilot.press("escape")

    asyncio.run(session())

    todo = controller.state.todos[0]
    assert todo.task == "buy"
    assert todo.completed is True
