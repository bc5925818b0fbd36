from __future__ import annotations

import argparse
import asyncio
import errno
import io
import sys
from contextlib import suppress
from typing import Any, Callable, Iterable, TextIO

from prompt_toolkit.application import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import ConditionalContainer, HSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.mouse_events import MouseEvent, MouseEventType
from prompt_toolkit.output import Output, create_output
from prompt_toolkit.styles import Style
from prompt_toolkit.widgets import TextArea
from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from ..config.manager import ConfigManager
from ..config.paths import AskgatePaths
from ..core.controller import (
    Escape,
    InputEvent,
    Phase,
    PointerSelect,
    SelectionController,
    SelectionState,
    TextChanged,
)
from ..core.emitter import OutputEmitter
from ..core.options import DENY_VALUE, OptionModel
from ..core.project import DEFAULT_PROJECT_FOLDERS, abbreviate_home, derive_project_label
from ..core.request import Request, read_request
from ..core.session_log import (
    SessionLogger,
    log_exception,
    log_info,
    log_warn,
    set_active_logger,
)
from .clipboard import RawInputEcho
from .presenter import LIST_KEYS, REASON_KEYS, Presenter, TerminalUnavailable

TTY_PATH = "/dev/tty"
RAISE_WINDOW_SEQUENCE = "\033[5t"
COPY_KEY = "c-y"

EXIT_CODE_OK = 0
EXIT_CODE_NO_VERDICT = 1

PROMPT_STYLE = Style.from_dict(
    {
        "prompt": "",
        "choice": "",
        "selected": "reverse",
        "hint": "#888888",
        "copied": "bold ansigreen",
    }
)


def render_header(
    request: Request,
    *,
    width: int,
    project_folders: Iterable[str] = DEFAULT_PROJECT_FOLDERS,
    home: str | None = None,
) -> str:
    """Render the request summary as ANSI text for the prompt header."""
    project = derive_project_label(request.working_directory, project_folders)
    location = abbreviate_home(request.working_directory, home)
    title = f"{project} · {location}" if location else project
    body: list[Any] = []
    if request.action_text:
        body.append(Text(request.action_text, style="bold"))
    if request.detail_text:
        if body:
            body.append(Text(""))
        body.append(Text(request.detail_text, overflow="fold"))
    if not body:
        body.append(Text("(no details provided)", style="dim"))
    console = Console(
        width=max(20, width),
        record=True,
        force_terminal=True,
        color_system="truecolor",
        legacy_windows=False,
        file=io.StringIO(),
    )
    console.print(
        Panel(
            Group(*body),
            title=Text(f"⚠ Permission required: {request.tool_name}"),
            title_align="left",
            subtitle=Text(title),
            subtitle_align="left",
            border_style="yellow",
        )
    )
    return console.export_text(styles=True)


class TerminalPresenter(Presenter):
    """prompt_toolkit front end drawn on the controlling terminal.

    stdin carries the request and stdout carries the verdict, so the UI talks to
    ``/dev/tty`` unless explicit input/output objects are supplied.
    """

    def __init__(
        self,
        controller: SelectionController,
        echo: RawInputEcho,
        *,
        project_folders: Iterable[str] = DEFAULT_PROJECT_FOLDERS,
        input: Input | None = None,
        output: Output | None = None,
    ) -> None:
        super().__init__(controller)
        self.echo = echo
        self.project_folders = tuple(project_folders)
        self._input = input
        self._output = output
        self._tty: TextIO | None = None
        self._app: Application | None = None
        self._reason_area: TextArea | None = None
        self._options_window: Window | None = None
        self._header_cache: tuple[int, str] | None = None
        self._finished = False
        self._state = controller.state

    # Presenter API

    def acquire_focus(self, steal_foreground: bool = False) -> None:
        if self._input is None or self._output is None:
            try:
                self._tty = open(TTY_PATH, "r+", encoding="utf-8")
            except OSError as exc:
                raise TerminalUnavailable(f"Cannot open {TTY_PATH}: {exc}") from exc
            if self._input is None:
                self._input = create_input(stdin=self._tty)
            if self._output is None:
                self._output = create_output(stdout=self._tty)
        if steal_foreground:
            self._output.write_raw(RAISE_WINDOW_SEQUENCE)
            self._output.flush()

    def render(self, state: SelectionState) -> None:
        self._state = state
        if state.is_terminal or self._app is None:
            return
        if state.phase is Phase.AWAITING_REASON and self._reason_area is not None:
            if not self._app.layout.has_focus(self._reason_area):
                self._app.layout.focus(self._reason_area)
        self._app.invalidate()

    def run(self) -> None:
        asyncio.run(self.run_async())

    async def run_async(self) -> None:
        if self._finished or self.controller.state.is_terminal:
            return
        if self._input is None or self._output is None:
            self.acquire_focus(steal_foreground=False)
        self._app = self._build_application()
        self.echo.bind_change(self._app.invalidate)
        try:
            await self._app.run_async()
        finally:
            self.echo.cancel()
            self.echo.bind_change(None)
            self._close_tty()

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        app = self._app
        if app is not None and app.is_running:
            app.exit()

    # Layout

    def _build_application(self) -> Application:
        browsing = Condition(lambda: self._state.phase is Phase.BROWSING)
        awaiting = Condition(lambda: self._state.phase is Phase.AWAITING_REASON)

        header = Window(
            FormattedTextControl(self._header_fragments, show_cursor=False),
            dont_extend_height=True,
        )
        self._options_window = Window(
            FormattedTextControl(self._option_fragments, focusable=True, show_cursor=False),
            dont_extend_height=True,
        )
        self._reason_area = TextArea(
            multiline=False,
            prompt="Reason (optional): ",
            focus_on_click=True,
        )
        self._reason_area.buffer.on_text_changed += self._on_reason_changed
        reason_hints = Window(
            FormattedTextControl(
                [("class:hint", "Enter to submit · Esc to skip (deny without a reason)")]
            ),
            dont_extend_height=True,
        )
        footer = Window(
            FormattedTextControl(self._footer_fragments, show_cursor=False),
            dont_extend_height=True,
        )
        body = HSplit(
            [
                header,
                ConditionalContainer(self._options_window, filter=browsing),
                ConditionalContainer(
                    HSplit([self._reason_area, reason_hints]), filter=awaiting
                ),
                footer,
            ]
        )
        layout = Layout(body, focused_element=self._options_window)
        return Application(
            layout=layout,
            key_bindings=self._key_bindings(browsing, awaiting),
            style=PROMPT_STYLE,
            mouse_support=True,
            full_screen=False,
            erase_when_done=True,
            input=self._input,
            output=self._output,
        )

    def _key_bindings(self, browsing: Condition, awaiting: Condition) -> KeyBindings:
        bindings = KeyBindings()
        for key, factory in LIST_KEYS.items():
            bindings.add(key, filter=browsing)(self._forward(factory))
        for key, factory in REASON_KEYS.items():
            bindings.add(key, filter=awaiting)(self._forward(factory))

        @bindings.add(COPY_KEY)
        def _copy(event) -> None:  # type: ignore[no-untyped-def]
            self.echo.copy(event.app.output)

        return bindings

    def _forward(self, factory: Callable[[], InputEvent]) -> Callable[[Any], None]:
        def _handler(event) -> None:  # type: ignore[no-untyped-def]
            self.dispatch(factory())

        return _handler

    def _on_reason_changed(self, buffer) -> None:  # type: ignore[no-untyped-def]
        self.dispatch(TextChanged(buffer.text))

    def _header_fragments(self):  # type: ignore[no-untyped-def]
        width = self._columns()
        if self._header_cache is None or self._header_cache[0] != width:
            text = render_header(
                self.controller.request,
                width=width,
                project_folders=self.project_folders,
            )
            self._header_cache = (width, text)
        return ANSI(self._header_cache[1])

    def _option_fragments(self):  # type: ignore[no-untyped-def]
        lines = []
        selection = self._state.current_index
        for idx, option in enumerate(self.controller.options):
            marker = ">" if idx == selection else " "
            style = "class:selected" if idx == selection else "class:choice"
            hint = f"  {option.shortcut_hint}" if option.shortcut_hint else ""
            lines.append(
                (style, f"{marker} {option.icon_ref} {option.label}{hint}\n", self._row_click(idx))
            )
        lines.append(
            (
                "class:hint",
                "\nUse ↑/↓ to select, Enter to confirm, Esc/Ctrl+C to deny.",
            )
        )
        return lines

    def _footer_fragments(self):  # type: ignore[no-untyped-def]
        if not self.echo.raw_text:
            return []
        style = "class:copied" if self.echo.copied else "class:hint"
        return [
            ("", "\n"),
            (style, f"[{self.echo.label()}] (Ctrl+Y)", self._copy_click),
        ]

    def _row_click(self, row: int):  # type: ignore[no-untyped-def]
        def _handler(mouse_event: MouseEvent):  # type: ignore[no-untyped-def]
            if mouse_event.event_type != MouseEventType.MOUSE_UP:
                return NotImplemented
            self.dispatch(PointerSelect(row))
            return None

        return _handler

    def _copy_click(self, mouse_event: MouseEvent):  # type: ignore[no-untyped-def]
        if mouse_event.event_type != MouseEventType.MOUSE_UP:
            return NotImplemented
        self.echo.copy(self._output)
        return None

    def _columns(self) -> int:
        if self._output is None:
            return 80
        with suppress(Exception):
            return self._output.get_size().columns
        return 80

    def _close_tty(self) -> None:
        if self._tty is not None:
            with suppress(OSError):
                self._tty.close()
            self._tty = None


def run_prompt(
    request: Request,
    *,
    stdout: TextIO | None = None,
    paths: AskgatePaths | None = None,
    console: Console | None = None,
    presenter_factory: Callable[..., Presenter] | None = None,
) -> int:
    """Run one decision round and return the process exit code.

    Whatever happens on the way, exactly one verdict line is written: when the
    interactive round cannot complete, the Escape path decides (``deny``).
    The status is 0 whenever that line was written.
    """
    paths = paths or AskgatePaths()
    console = console or Console(stderr=True)
    emitter = OutputEmitter(stdout)
    controller: SelectionController | None = None
    logger: SessionLogger | None = None
    try:
        settings = ConfigManager(paths, console=console).load_settings()
        logger = SessionLogger(paths, settings.debug)
        set_active_logger(logger)
        logger.log_request("cli", request)

        options = OptionModel.from_set(settings.option_set)
        controller = SelectionController(request, options, on_verdict=emitter.emit)
        echo = RawInputEcho(request.raw_input_text)
        factory = presenter_factory or TerminalPresenter
        presenter = factory(controller, echo, project_folders=settings.project_folders)
        emitter.bind_finish(presenter.finish)
        presenter.acquire_focus(steal_foreground=False)
        presenter.run()
    except TerminalUnavailable as exc:
        log_warn("cli", "terminal.unavailable", {"error": str(exc)})
        console.print(f"[yellow]{escape(str(exc))}. Denying by default.[/yellow]", highlight=False)
    except (EOFError, KeyboardInterrupt):
        log_info("cli", "prompt.interrupted")
    except BrokenPipeError:
        raise
    except Exception as exc:
        log_exception("cli", exc)
        console.print(f"[red]Prompt failed: {type(exc).__name__}. Denying by default.[/red]")
    finally:
        try:
            if controller is not None and not controller.state.is_terminal:
                controller.handle(Escape())
            elif controller is None and not emitter.emitted:
                emitter.emit(DENY_VALUE)
        finally:
            if logger is not None:
                logger.close()
            set_active_logger(None)
    return EXIT_CODE_OK if emitter.emitted else EXIT_CODE_NO_VERDICT


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Askgate - ask a human to allow or deny a pending action"
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    args, _ = parser.parse_known_args()
    if args.version:
        from askgate import __version__

        print(f"askgate {__version__}")
        return
    try:
        request = read_request(sys.stdin)
        code = run_prompt(request)
        raise SystemExit(code)
    except BrokenPipeError:
        return
    except OSError as exc:
        if exc.errno == errno.EPIPE:
            return
        log_exception("cli", exc)
        raise


if __name__ == "__main__":
    main()
