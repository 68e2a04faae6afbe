"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

STORE_DIRNAME = ".rememberall"
DEFAULT_PATTERN = "*.markdown"


class ConfigurationError(Exception):
    """Raised when the application cannot be configured to run at all."""


class Mode(str, Enum):
    """Index generation; fixes what the corpus-level term statistic means."""

    PROBABILISTIC = "probabilistic"
    FREQUENCY = "frequency"


def _get_default_store_dir() -> Path:
    """Get the per-user store directory under the home directory."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigurationError("Could not resolve the home directory; please set $HOME") from exc
    return home / STORE_DIRNAME


@dataclass(slots=True)
class AppConfig:
    store_dir: Path | None = None
    mode: Mode = Mode.PROBABILISTIC
    note_pattern: str = DEFAULT_PATTERN
    top_n: int = 1

    def __post_init__(self) -> None:
        if self.store_dir is None:
            self.store_dir = _get_default_store_dir()
        try:
            self.mode = Mode(self.mode)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown index mode: {self.mode}") from exc

    def resolve_store_dir(self, base_dir: Path | None = None) -> Path:
        if self.store_dir is None:
            self.store_dir = _get_default_store_dir()
        if Path(self.store_dir).is_absolute() or base_dir is None:
            return Path(self.store_dir)
        return base_dir / self.store_dir
