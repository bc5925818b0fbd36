"""Configuration package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .manager import AskgateSettings, ConfigManager
    from .paths import AskgatePaths

__all__ = ["AskgateSettings", "ConfigManager", "AskgatePaths"]


def __getattr__(name: str) -> Any:
    if name in {"ConfigManager", "AskgateSettings"}:
        from .manager import AskgateSettings, ConfigManager

        return {"ConfigManager": ConfigManager, "AskgateSettings": AskgateSettings}[name]
    if name == "AskgatePaths":
        from .paths import AskgatePaths

        return AskgatePaths
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
