from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, ClassVar

from .grid import SlotGrid
from .models import Mode, Task
from .storage import StoreError, TaskGateway
from .timeutils import parse_minutes, slot_index
from .viewport import Viewport

log = logging.getLogger(__name__)

UP_KEYS = {"up"}
DOWN_KEYS = {"down"}
NOW_KEYS = {"t", "T", "shift+t"}
QUIT_KEYS = {"q", "ctrl+c"}
DELETE_KEY = "d"


class FormValidationError(ValueError):
    """User input in the task form that cannot be submitted."""


TITLE_FIELD = 0
DURATION_FIELD = 1


@dataclass(slots=True)
class TaskForm:
    """Values of the new-task form; the text widgets write into it."""

    title: str = ""
    duration: str = ""
    active: int = TITLE_FIELD
    error: str = ""

    def switch_field(self) -> None:
        self.active = DURATION_FIELD if self.active == TITLE_FIELD else TITLE_FIELD

    def validate(self, default_duration: int) -> tuple[str, int]:
        title = self.title.strip()
        if not title:
            raise FormValidationError("Title cannot be empty")
        if not self.duration:
            return title, default_duration
        try:
            return title, parse_minutes(self.duration)
        except ValueError as exc:
            raise FormValidationError("Invalid duration") from exc


@dataclass(slots=True)
class DeleteConfirmation:
    """Two-press guard: the first press arms it, the second commits."""

    pending: bool = False

    def press(self) -> bool:
        if self.pending:
            self.pending = False
            return True
        self.pending = True
        return False

    def reset(self) -> None:
        self.pending = False


@dataclass(slots=True)
class Browsing:
    mode: ClassVar[Mode] = Mode.BROWSING


@dataclass(slots=True)
class Selecting:
    mode: ClassVar[Mode] = Mode.SELECTION
    task_cursor: int = 0
    confirmation: DeleteConfirmation = field(default_factory=DeleteConfirmation)


@dataclass(slots=True)
class Creating:
    mode: ClassVar[Mode] = Mode.CREATION
    form: TaskForm = field(default_factory=TaskForm)


@dataclass(slots=True)
class ErrorBanner:
    message: str
    raised_at: datetime

    def visible(self, now: datetime, lifetime: float) -> bool:
        return now - self.raised_at < timedelta(seconds=lifetime)


class Planner:
    """Session state of one running planner and the key-driven transitions over it."""

    def __init__(
        self,
        store: TaskGateway,
        *,
        viewport_height: int = 6,
        default_duration: int = 30,
        banner_seconds: float = 3.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.default_duration = default_duration
        self.banner_seconds = banner_seconds
        self._clock = clock
        now = self._clock()
        self.current_date: date = now.date()
        self.now_slot = slot_index(now)
        self.cursor = self.now_slot
        self.selected = self.now_slot
        self.viewport = Viewport.around(self.now_slot, viewport_height)
        self.grid = SlotGrid.generate(self.current_date)
        self.state: Browsing | Selecting | Creating = Browsing()
        self.banner: ErrorBanner | None = None
        self.quit_requested = False
        self._reload_or_report()

    # -- read-only views -------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.state.mode

    @property
    def form(self) -> TaskForm | None:
        return self.state.form if isinstance(self.state, Creating) else None

    @property
    def task_cursor(self) -> int | None:
        return self.state.task_cursor if isinstance(self.state, Selecting) else None

    @property
    def delete_pending(self) -> bool:
        return isinstance(self.state, Selecting) and self.state.confirmation.pending

    @property
    def cursor_tasks(self) -> list[Task]:
        return self.grid.tasks_at(self.cursor)

    @property
    def highlighted_task(self) -> Task | None:
        if not isinstance(self.state, Selecting):
            return None
        tasks = self.cursor_tasks
        if 0 <= self.state.task_cursor < len(tasks):
            return tasks[self.state.task_cursor]
        return None

    def is_today(self) -> bool:
        return self.current_date == self._clock().date()

    def banner_message(self) -> str | None:
        if self.banner is None:
            return None
        if not self.banner.visible(self._clock(), self.banner_seconds):
            return None
        return self.banner.message

    # -- events ----------------------------------------------------------

    def handle_key(self, key: str, character: str | None = None) -> bool:
        """Apply one key press. Returns False when the key had no effect."""
        handler = {
            Mode.BROWSING: self._browsing_key,
            Mode.SELECTION: self._selection_key,
            Mode.CREATION: self._creation_key,
        }[self.mode]
        return handler(key, character)

    def tick(self) -> bool:
        current = slot_index(self._clock())
        if current == self.now_slot:
            return False
        self.now_slot = current
        return True

    # -- browsing --------------------------------------------------------

    def _browsing_key(self, key: str, character: str | None) -> bool:
        if key in QUIT_KEYS:
            self.quit_requested = True
            return True
        if key in UP_KEYS:
            return self.move_cursor(-1)
        if key in DOWN_KEYS:
            return self.move_cursor(1)
        if key == "left":
            self.change_day(-1)
            return True
        if key == "right":
            self.change_day(1)
            return True
        if key in NOW_KEYS:
            self.jump_to_now()
            return True
        if key == "n":
            self.open_creation()
            return True
        if key == "enter":
            return self.enter_selection()
        return False

    def move_cursor(self, delta: int) -> bool:
        target = self.cursor + delta
        if not 0 <= target < len(self.grid):
            return False
        self.cursor = target
        self.viewport.follow(self.cursor)
        return True

    def change_day(self, delta: int) -> None:
        self.current_date += timedelta(days=delta)
        self.grid = SlotGrid.generate(self.current_date)
        self._reload_or_report()

    def jump_to_now(self) -> None:
        now = self._clock()
        self.current_date = now.date()
        self.now_slot = slot_index(now)
        self.cursor = self.now_slot
        self.viewport.centre_on(self.now_slot)
        self.grid = SlotGrid.generate(self.current_date)
        self._reload_or_report()

    def open_creation(self) -> None:
        self.selected = self.cursor
        self.state = Creating()
        log.debug("Creating task at slot %s of %s", self.selected, self.current_date)

    def enter_selection(self) -> bool:
        if not self.cursor_tasks:
            return False
        self.state = Selecting()
        return True

    # -- selection -------------------------------------------------------

    def _selection_key(self, key: str, character: str | None) -> bool:
        assert isinstance(self.state, Selecting)
        if key == DELETE_KEY:
            if self.state.confirmation.press():
                self.delete_highlighted()
            return True
        self.state.confirmation.reset()
        if key == "escape":
            self.state = Browsing()
            return True
        if key in UP_KEYS:
            return self._move_task_cursor(-1)
        if key in DOWN_KEYS:
            return self._move_task_cursor(1)
        return False

    def _move_task_cursor(self, delta: int) -> bool:
        assert isinstance(self.state, Selecting)
        target = self.state.task_cursor + delta
        if not 0 <= target < len(self.cursor_tasks):
            return False
        self.state.task_cursor = target
        return True

    def delete_highlighted(self) -> None:
        assert isinstance(self.state, Selecting)
        task = self.highlighted_task
        if task is None:
            self.state = Browsing()
            return
        try:
            self.store.delete(task.task_id)
        except StoreError as exc:
            self._raise_banner(f"Failed to delete task: {exc}")
            return
        log.info("Deleted task %s (%s)", task.task_id, task.title)
        self.grid.remove(self.cursor, task.task_id)
        remaining = len(self.cursor_tasks)
        if remaining == 0:
            self.state = Browsing()
            return
        self.state.task_cursor = min(self.state.task_cursor, remaining - 1)

    # -- creation --------------------------------------------------------

    def _creation_key(self, key: str, character: str | None) -> bool:
        assert isinstance(self.state, Creating)
        form = self.state.form
        if key == "escape":
            self.state = Browsing()
            return True
        if key == "tab":
            form.switch_field()
            return True
        if key == "enter":
            self.submit()
            return True
        # text editing belongs to the input widgets
        return False

    def edit_form(self, *, title: str | None = None, duration: str | None = None) -> None:
        form = self.form
        if form is None:
            return
        if title is not None:
            form.title = title
        if duration is not None:
            form.duration = duration

    def submit(self) -> bool:
        assert isinstance(self.state, Creating)
        form = self.state.form
        try:
            title, duration = form.validate(self.default_duration)
        except FormValidationError as exc:
            form.error = str(exc)
            return False
        try:
            self.store.save(self.current_date, self.cursor, title, duration)
        except StoreError:
            form.error = "Failed to save task"
            return False
        try:
            self.load_tasks()
        except StoreError:
            form.error = "Failed to reload tasks"
            return False
        self.state = Browsing()
        return True

    # -- persistence -----------------------------------------------------

    def load_tasks(self) -> None:
        tasks = self.store.list_for_date(self.current_date)
        self.grid.populate(tasks)

    def _reload_or_report(self) -> None:
        try:
            self.load_tasks()
        except StoreError as exc:
            self._raise_banner(f"Failed to load tasks: {exc}")

    def _raise_banner(self, message: str) -> None:
        log.error(message)
        self.banner = ErrorBanner(message, self._clock())
