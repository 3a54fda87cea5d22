from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from rich.markup import escape
from textual.app import App, ComposeResult  # type: ignore[import]
from textual.containers import Vertical  # type: ignore[import]
from textual.widget import Widget  # type: ignore[import]
from textual.widgets import Header, Input, Static  # type: ignore[import]
from textual import events  # type: ignore[import]

from ..config import ConfigManager, DaySlotsConfig
from ..models import Mode, Task
from ..planner import TITLE_FIELD, Planner
from ..storage import TaskGateway, TaskStore
from ..timeutils import format_day, format_slot_range

log = logging.getLogger(__name__)

HELP_TEXT = {
    Mode.BROWSING: "Navigate: ↑/↓ • Change Day: ←/→ • New Task: n • Select: Enter • Current Time: t • Quit: q",
    Mode.SELECTION: "Move: ↑/↓ • Delete: d twice • Back: Esc",
    Mode.CREATION: "Tab: Switch fields • Enter: Save • Esc: Cancel",
}


def render_header(planner: Planner) -> str:
    return f"📅 {format_day(planner.current_date)}"


def _render_task(task: Task, highlighted: bool, pending: bool) -> str:
    title = escape(task.title)
    if task.done:
        line = f"✓ {title}"
    else:
        line = f"• {title} ({task.duration}m)"
    if not highlighted:
        return f"   {line}"
    marker = "[bold red]✗[/bold red]" if pending else "[bold]▸[/bold]"
    return f" {marker} [reverse]{line}[/reverse]"


def render_slots(planner: Planner) -> str:
    today = planner.is_today()
    highlighted = planner.highlighted_task
    lines: list[str] = []
    for index in planner.viewport.indices:
        slot = planner.grid[index]
        label = format_slot_range(slot.start)
        if index == planner.cursor:
            lines.append(f"[bold white on dark_blue] {label} [/bold white on dark_blue]")
        elif index == planner.now_slot and today:
            lines.append(f"[white on dark_red] {label} [/white on dark_red]")
        else:
            lines.append(f" {label} ")
        for task in slot.tasks:
            is_highlighted = highlighted is not None and task is highlighted
            lines.append(_render_task(task, is_highlighted, is_highlighted and planner.delete_pending))
    return "\n".join(lines)


def render_form_title(planner: Planner) -> str:
    if planner.form is None:
        return ""
    slot = planner.grid[planner.selected]
    return f"New Task at {format_slot_range(slot.start)}"


def render_form_error(planner: Planner) -> str:
    form = planner.form
    if form is None or not form.error:
        return ""
    return f"[red]{escape(form.error)}[/red]"


def render_help(planner: Planner) -> str:
    if planner.mode is Mode.CREATION:
        return ""
    text = f"[dim]{HELP_TEXT[planner.mode]}[/dim]"
    if planner.delete_pending:
        text += "\n[bold red]Press d again to delete[/bold red]"
    return text


class DayView(Static, can_focus=True):
    """Focus target that routes every key press into the planner."""

    def on_key(self, event: events.Key) -> None:  # type: ignore[override]
        event.stop()
        event.prevent_default()
        self.app.apply_key(event.key, event.character)


class FormInput(Input):
    """Task form input; tab and escape drive the form instead of the text."""

    FORM_KEYS = {"tab", "escape"}

    def on_key(self, event: events.Key) -> None:  # type: ignore[override]
        if event.key not in self.FORM_KEYS:
            return
        event.stop()
        event.prevent_default()
        self.app.apply_key(event.key, event.character)


class DaySlotsApp(App):
    CSS = """
    Screen {
        background: $surface;
    }

    #planner-panel {
        width: 56;
        height: auto;
        margin: 1 2;
    }

    .panel {
        border: round $accent;
        padding: 1 2;
        background: $boost;
        layout: vertical;
    }

    .panel-title {
        text-style: bold;
        color: $success;
        margin-bottom: 1;
    }

    .panel-help {
        color: $text-muted;
        margin-top: 1;
    }

    #task-form {
        border: round $accent;
        padding: 1 2;
        margin: 1 0;
        height: auto;
    }

    #day-view:focus {
        background: $boost;
    }
    """
    TITLE = "Dayslots Planner"

    def __init__(
        self,
        config: DaySlotsConfig | None = None,
        store: TaskGateway | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__()
        if config is None:
            config = ConfigManager().load()
        self.config = config
        self.store = store if store is not None else TaskStore(config.storage.database)
        self.planner = Planner(
            self.store,
            viewport_height=config.planner.viewport_height,
            default_duration=config.planner.default_duration,
            banner_seconds=config.planner.banner_seconds,
            clock=clock,
        )
        self.day_header = Static("", classes="panel-title", id="day-header")
        self.day_view = DayView("", id="day-view")
        self.banner_line = Static("", id="banner")
        self.title_input = FormInput(placeholder="Task title", max_length=50, id="task-title")
        self.duration_input = FormInput(
            placeholder="Duration (minutes)",
            max_length=3,
            type="integer",
            id="task-duration",
        )
        self.form_title = Static("", classes="panel-title", id="form-title")
        self.form_error = Static("", id="form-error")
        self.help_line = Static("", classes="panel-help", id="help")
        self._form_open = False

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        form_panel = Vertical(
            self.form_title,
            self.title_input,
            self.duration_input,
            self.form_error,
            Static(HELP_TEXT[Mode.CREATION], classes="panel-help"),
            id="task-form",
        )
        form_panel.display = False
        yield Vertical(
            self.day_header,
            self.day_view,
            self.banner_line,
            form_panel,
            self.help_line,
            id="planner-panel",
            classes="panel",
        )

    def on_mount(self) -> None:
        self.day_view.focus()
        self.set_interval(self.config.planner.tick_seconds, self.on_tick)
        if self.planner.banner is not None:
            self.set_timer(self.config.planner.banner_seconds, self.refresh_view)
        self.refresh_view()

    def on_tick(self) -> None:
        if self.planner.tick():
            self.refresh_view()

    def apply_key(self, key: str, character: str | None = None) -> None:
        mode_before = self.planner.mode
        banner_before = self.planner.banner
        handled = self.planner.handle_key(key, character)
        if self.planner.quit_requested:
            self.exit()
            return
        if self.planner.mode is not mode_before:
            log.debug("Mode %s -> %s", mode_before.value, self.planner.mode.value)
        if self.planner.banner is not banner_before:
            # redraw once the banner has expired
            self.set_timer(self.config.planner.banner_seconds, self.refresh_view)
        if not handled and mode_before is not Mode.CREATION:
            self.bell()
        self.refresh_view()

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input is self.title_input:
            self.planner.edit_form(title=event.value)
        elif event.input is self.duration_input:
            self.planner.edit_form(duration=event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self.apply_key("enter")

    def refresh_view(self) -> None:
        planner = self.planner
        creating = planner.mode is Mode.CREATION
        self.day_header.update(render_header(planner))
        self.day_view.update(render_slots(planner))
        message = planner.banner_message()
        self.banner_line.update(f"[red]{escape(message)}[/red]" if message else "")
        self.query_one("#task-form").display = creating
        self.form_title.update(render_form_title(planner))
        self.form_error.update(render_form_error(planner))
        if creating and not self._form_open:
            self.title_input.value = ""
            self.duration_input.value = ""
        self._form_open = creating
        self.help_line.update(render_help(planner))
        self.focus_target().focus()

    def focus_target(self) -> Widget:
        form = self.planner.form
        if form is None:
            return self.day_view
        if form.active == TITLE_FIELD:
            return self.title_input
        return self.duration_input

    def on_unmount(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()
