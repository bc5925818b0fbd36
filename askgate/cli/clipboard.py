from __future__ import annotations

import asyncio
import base64
import shutil
import subprocess
import sys
from contextlib import suppress
from pathlib import Path
from typing import Any, Callable

import pyperclip
from pyperclip import PyperclipException

from ..core.session_log import log_warn

FEEDBACK_REVERT_SECONDS = 1.0

LINUX_CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
)


def _darwin_clipboard_cmd(name: str) -> str | None:
    path = Path("/usr/bin") / name
    if path.exists():
        return str(path)
    return shutil.which(name)


def _clipboard_commands() -> list[list[str]]:
    if sys.platform == "darwin":
        cmd = _darwin_clipboard_cmd("pbcopy")
        return [[cmd]] if cmd else []
    if sys.platform.startswith("linux"):
        return [list(argv) for argv in LINUX_CLIPBOARD_COMMANDS if shutil.which(argv[0])]
    return []


def _run_clipboard_command(argv: list[str], text: str) -> bool:
    try:
        subprocess.run(argv, input=text.encode("utf-8"), check=True)
    except (OSError, subprocess.SubprocessError) as exc:
        log_warn("clipboard", "clipboard.command_failed", {"command": argv[0], "error": str(exc)})
        return False
    return True


def _copy_with_pyperclip(text: str) -> bool:
    try:
        pyperclip.copy(text)
    except PyperclipException as exc:
        log_warn("clipboard", "clipboard.pyperclip_failed", {"error": str(exc)})
        return False
    return True


def _write_system_clipboard(text: str) -> bool:
    commands = _clipboard_commands()
    if sys.platform == "darwin":
        return any(_run_clipboard_command(argv, text) for argv in commands) or _copy_with_pyperclip(text)
    return _copy_with_pyperclip(text) or any(_run_clipboard_command(argv, text) for argv in commands)


def _emit_osc52_clipboard(output: Any, text: str) -> None:
    if not text or output is None:
        return
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    osc = f"\033]52;c;{payload}\a"
    writer = getattr(output, "write_raw", None) or getattr(output, "write", None)
    if writer is None:
        return
    with suppress(Exception):
        writer(osc)
        flush = getattr(output, "flush", None)
        if flush is not None:
            flush()


class RawInputEcho:
    """Copies the raw request text and shows a short-lived "copied" marker.

    Nothing here can fail loudly: the clipboard is a convenience next to the
    decision, never part of it.
    """

    def __init__(
        self,
        raw_text: str,
        *,
        writer: Callable[[str], bool] = _write_system_clipboard,
        revert_after: float = FEEDBACK_REVERT_SECONDS,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.raw_text = raw_text
        self._writer = writer
        self._revert_after = revert_after
        self._on_change = on_change
        self._timer: asyncio.TimerHandle | None = None
        self.copied = False

    def bind_change(self, on_change: Callable[[], None] | None) -> None:
        self._on_change = on_change

    def copy(self, output: Any = None) -> bool:
        ok = False
        try:
            ok = bool(self._writer(self.raw_text))
        except Exception as exc:
            log_warn("clipboard", "clipboard.copy_failed", {"error": str(exc)})
        if not ok:
            log_warn("clipboard", "clipboard.unavailable")
        _emit_osc52_clipboard(output, self.raw_text)
        self.copied = True
        self._notify()
        self._schedule_revert()
        return ok

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def label(self) -> str:
        return "Copied ✓" if self.copied else "Copy raw input"

    def _schedule_revert(self) -> None:
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._timer = loop.call_later(self._revert_after, self._revert)

    def _revert(self) -> None:
        self._timer = None
        self.copied = False
        self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            with suppress(Exception):
                self._on_change()
