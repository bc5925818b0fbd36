from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AskgatePaths:
    """Centralizes filesystem paths used by the prompt."""

    home: Path = field(default_factory=Path.home)

    @property
    def askgate_dir(self) -> Path:
        return self.home / ".askgate"

    @property
    def config_file(self) -> Path:
        return self.askgate_dir / "askgate.json"

    @property
    def logs_dir(self) -> Path:
        return self.askgate_dir / "logs"
