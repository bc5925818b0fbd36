"""Terminal front end for askgate."""

from .app import TerminalPresenter, main, render_header, run_prompt
from .clipboard import RawInputEcho
from .presenter import LIST_KEYS, REASON_KEYS, Presenter, TerminalUnavailable

__all__ = [
    "LIST_KEYS",
    "Presenter",
    "REASON_KEYS",
    "RawInputEcho",
    "TerminalPresenter",
    "TerminalUnavailable",
    "main",
    "render_header",
    "run_prompt",
]
