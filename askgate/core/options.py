from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

ALLOW_VALUE = "allow"
ALLOW_ALWAYS_VALUE = "allow_always"
DENY_VALUE = "deny"


class OptionModelError(ValueError):
    pass


@dataclass(frozen=True)
class Option:
    label: str
    shortcut_hint: str
    icon_ref: str
    value: str


ALLOW = Option(label="Allow", shortcut_hint="⏎", icon_ref="✔", value=ALLOW_VALUE)
ALLOW_ALWAYS = Option(
    label="Allow always",
    shortcut_hint="",
    icon_ref="✔✔",
    value=ALLOW_ALWAYS_VALUE,
)
DENY = Option(label="Deny", shortcut_hint="esc", icon_ref="✖", value=DENY_VALUE)

OPTION_SETS: dict[str, tuple[Option, ...]] = {
    "basic": (ALLOW, DENY),
    "extended": (ALLOW, ALLOW_ALWAYS, DENY),
}
DEFAULT_OPTION_SET = "extended"


class OptionModel:
    """Ordered, read-only list of the options offered by this build."""

    def __init__(self, options: Iterable[Option]) -> None:
        items = tuple(options)
        if len(items) < 2:
            raise OptionModelError("At least two options are required.")
        deny_rows = [idx for idx, option in enumerate(items) if option.value == DENY_VALUE]
        if len(deny_rows) != 1:
            raise OptionModelError(
                f"Exactly one option must carry the value {DENY_VALUE!r}."
            )
        self._options = items
        self._deny_index = deny_rows[0]

    @classmethod
    def from_set(cls, name: str) -> "OptionModel":
        try:
            return cls(OPTION_SETS[name])
        except KeyError:
            raise OptionModelError(f"Unknown option set: {name}") from None

    @property
    def deny_index(self) -> int:
        return self._deny_index

    def count(self) -> int:
        return len(self._options)

    def at(self, index: int) -> Option:
        if not 0 <= index < len(self._options):
            raise IndexError(f"Option index out of range: {index}")
        return self._options[index]

    def values(self) -> list[str]:
        return [option.value for option in self._options]

    def __len__(self) -> int:
        return len(self._options)

    def __iter__(self) -> Iterator[Option]:
        return iter(self._options)
