"""Selection state machine for the permission prompt.

The controller owns the only mutable state of the prompt. Presenters feed it
typed input events; every call returns a :class:`Transition` holding the new
immutable :class:`SelectionState` and whether a re-render is needed. The first
transition into ``TERMINAL`` hands the verdict to the sink exactly once; after
that every event is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Union

from .options import DENY_VALUE, OptionModel
from .request import Request
from .session_log import get_active_logger


class Phase(str, Enum):
    BROWSING = "browsing"
    AWAITING_REASON = "awaiting_reason"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class SelectionState:
    current_index: int = 0
    phase: Phase = Phase.BROWSING
    reason_text: str = ""
    verdict: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase is Phase.TERMINAL


@dataclass(frozen=True)
class MoveUp:
    pass


@dataclass(frozen=True)
class MoveDown:
    pass


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class PointerSelect:
    row: int


@dataclass(frozen=True)
class Escape:
    pass


@dataclass(frozen=True)
class TextChanged:
    text: str


@dataclass(frozen=True)
class Submit:
    pass


InputEvent = Union[MoveUp, MoveDown, Confirm, PointerSelect, Escape, TextChanged, Submit]


@dataclass(frozen=True)
class Transition:
    state: SelectionState
    render: bool


_LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def format_reason_verdict(reason_text: str) -> str:
    trimmed = _LINE_BREAKS.sub(" ", reason_text.strip())
    if not trimmed:
        return DENY_VALUE
    return f"{DENY_VALUE}:{trimmed}"


def reduce(state: SelectionState, event: InputEvent, options: OptionModel) -> SelectionState:
    """Pure transition function; returns ``state`` itself when nothing changes."""
    if state.phase is Phase.TERMINAL:
        return state
    if state.phase is Phase.BROWSING:
        return _reduce_browsing(state, event, options)
    return _reduce_awaiting_reason(state, event)


def _reduce_browsing(
    state: SelectionState, event: InputEvent, options: OptionModel
) -> SelectionState:
    last = options.count() - 1
    if isinstance(event, MoveUp):
        index = max(0, state.current_index - 1)
        return state if index == state.current_index else replace(state, current_index=index)
    if isinstance(event, MoveDown):
        index = min(last, state.current_index + 1)
        return state if index == state.current_index else replace(state, current_index=index)
    if isinstance(event, PointerSelect):
        if not 0 <= event.row <= last:
            return state
        return _confirm(replace(state, current_index=event.row), options)
    if isinstance(event, Confirm):
        return _confirm(state, options)
    if isinstance(event, Escape):
        return replace(state, phase=Phase.TERMINAL, verdict=DENY_VALUE)
    return state


def _confirm(state: SelectionState, options: OptionModel) -> SelectionState:
    value = options.at(state.current_index).value
    if value == DENY_VALUE:
        return replace(state, phase=Phase.AWAITING_REASON, reason_text="")
    return replace(state, phase=Phase.TERMINAL, verdict=value)


def _reduce_awaiting_reason(state: SelectionState, event: InputEvent) -> SelectionState:
    if isinstance(event, TextChanged):
        if event.text == state.reason_text:
            return state
        return replace(state, reason_text=event.text)
    if isinstance(event, Submit):
        return replace(
            state,
            phase=Phase.TERMINAL,
            verdict=format_reason_verdict(state.reason_text),
        )
    if isinstance(event, Escape):
        return replace(state, phase=Phase.TERMINAL, verdict=DENY_VALUE)
    return state


class SelectionController:
    """Drives the prompt from Browsing to a single terminal verdict."""

    def __init__(
        self,
        request: Request,
        options: OptionModel,
        *,
        on_verdict: Callable[[str], None] | None = None,
    ) -> None:
        self.request = request
        self.options = options
        self._on_verdict = on_verdict
        self._state = SelectionState()

    @property
    def state(self) -> SelectionState:
        return self._state

    def handle(self, event: InputEvent) -> Transition:
        previous = self._state
        if previous.is_terminal:
            return Transition(previous, render=False)
        current = reduce(previous, event, self.options)
        if current is previous:
            return Transition(current, render=False)
        self._state = current
        logger = get_active_logger()
        if logger is not None:
            logger.log_transition("controller", event, current)
        if current.is_terminal and self._on_verdict is not None:
            self._on_verdict(current.verdict)  # type: ignore[arg-type]
        return Transition(current, render=True)
