from __future__ import annotations

import sys
from typing import Callable, TextIO

from .session_log import get_active_logger


class VerdictAlreadyEmitted(RuntimeError):
    pass


class OutputEmitter:
    """Writes the verdict line to the caller and ends the prompt."""

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        on_finish: Callable[[], None] | None = None,
    ) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._on_finish = on_finish
        self._verdict: str | None = None

    @property
    def emitted(self) -> bool:
        return self._verdict is not None

    @property
    def verdict(self) -> str | None:
        return self._verdict

    def bind_finish(self, on_finish: Callable[[], None] | None) -> None:
        self._on_finish = on_finish

    def emit(self, verdict: str) -> None:
        if self._verdict is not None:
            raise VerdictAlreadyEmitted(
                f"Verdict {self._verdict!r} was already written; refusing {verdict!r}."
            )
        self._verdict = verdict
        self._stream.write(f"{verdict}\n")
        self._stream.flush()
        logger = get_active_logger()
        if logger is not None:
            logger.log_verdict("emitter", verdict)
        if self._on_finish is not None:
            self._on_finish()
