from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import Draft7Validator
from rich.console import Console
from rich.markup import escape

from ..core.options import DEFAULT_OPTION_SET, OPTION_SETS
from ..core.project import DEFAULT_PROJECT_FOLDERS
from .paths import AskgatePaths
from .resources import read_schema_text

DEFAULT_CONFIG: Dict[str, Any] = {
    "option_set": DEFAULT_OPTION_SET,
    "project_folders": list(DEFAULT_PROJECT_FOLDERS),
    "debug": None,
}


@dataclass(frozen=True)
class AskgateSettings:
    option_set: str
    project_folders: tuple[str, ...]
    debug: Any


class ConfigManager:
    """Reads ~/.askgate/askgate.json and applies defaults.

    Configuration problems are reported on stderr and never stop the prompt.
    """

    def __init__(self, paths: AskgatePaths, console: Optional[Console] = None) -> None:
        self.paths = paths
        self.console = console or Console(stderr=True)

    def load_settings(self) -> AskgateSettings:
        config = self.load_config()
        return AskgateSettings(
            option_set=config["option_set"],
            project_folders=tuple(config["project_folders"]),
            debug=config.get("debug"),
        )

    def load_config(self) -> Dict[str, Any]:
        data = self._read_json(self.paths.config_file)
        if not isinstance(data, dict):
            self._warn(f"Ignoring {self.paths.config_file}: expected a JSON object.")
            data = {}
        for message in self.validate(data):
            self._warn(f"Config {self.paths.config_file}: {message}")
        merged = dict(DEFAULT_CONFIG)
        merged.update(data)
        return self._normalize_config(merged)

    def validate(self, data: Dict[str, Any]) -> list[str]:
        schema = self._load_schema()
        if not schema:
            return []
        validator = Draft7Validator(schema)
        errors: list[str] = []
        for error in sorted(validator.iter_errors(data), key=lambda err: list(err.path)):
            path = ".".join(str(part) for part in error.path)
            prefix = f"{path}: " if path else ""
            errors.append(prefix + error.message)
        return errors

    def _normalize_config(self, data: Dict[str, Any]) -> Dict[str, Any]:
        normalized = dict(data)
        option_set = normalized.get("option_set")
        if isinstance(option_set, str):
            option_set = option_set.strip().lower()
        if not isinstance(option_set, str) or option_set not in OPTION_SETS:
            option_set = DEFAULT_OPTION_SET
        normalized["option_set"] = option_set

        raw_folders = normalized.get("project_folders")
        folders: list[str] = []
        if isinstance(raw_folders, list):
            for item in raw_folders:
                if isinstance(item, str) and item.strip():
                    folders.append(item.strip())
        normalized["project_folders"] = folders or list(DEFAULT_PROJECT_FOLDERS)
        return normalized

    def _load_schema(self) -> Dict[str, Any]:
        text = read_schema_text("askgate.schema.json")
        if not text:
            return {}
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            return {}
        return parsed if isinstance(parsed, dict) else {}

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return {}
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            self.console.print(
                f"[red]Failed to parse JSON config at {escape(str(path))}. Using defaults.[/red]"
            )
            return {}

    def _warn(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]", highlight=False)
