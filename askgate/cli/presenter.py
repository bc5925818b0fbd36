from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from ..core.controller import (
    Confirm,
    Escape,
    InputEvent,
    MoveDown,
    MoveUp,
    SelectionController,
    SelectionState,
    Submit,
)

# Raw key name -> typed event, per focused control. Presenters look keys up here
# and forward the result; deciding what an event means is the controller's job.
LIST_KEYS: dict[str, Callable[[], InputEvent]] = {
    "up": MoveUp,
    "down": MoveDown,
    "enter": Confirm,
    "escape": Escape,
    "c-c": Escape,
}
REASON_KEYS: dict[str, Callable[[], InputEvent]] = {
    "enter": Submit,
    "escape": Escape,
    "c-c": Escape,
}


class TerminalUnavailable(RuntimeError):
    pass


class Presenter(ABC):
    """Shows controller snapshots to a human and feeds their input back."""

    def __init__(self, controller: SelectionController) -> None:
        self.controller = controller

    def dispatch(self, event: InputEvent) -> None:
        transition = self.controller.handle(event)
        if transition.render:
            self.render(transition.state)

    @abstractmethod
    def render(self, state: SelectionState) -> None:
        """Redraw for ``state``."""

    @abstractmethod
    def acquire_focus(self, steal_foreground: bool = False) -> None:
        """Take keyboard input, raising the host window only when asked to."""

    @abstractmethod
    def run(self) -> None:
        """Block until the controller reaches a terminal state or input ends."""

    def finish(self) -> None:
        """Called once the verdict has been written."""
