# ABOUTME: Shared data structures, configuration and helpers for the typing analytics engine
import math
import re
import time
from typing import Dict, List, Optional, Any, Union, Callable
from dataclasses import dataclass, asdict
from pathlib import Path
import yaml
import logging

# Deletion sentinel sent by the typing screen for a backspace.
BACKSPACE = "Backspace"

# Named keys that are logged but carry no content.
NAMED_KEYS = ("Enter", "Tab", "Shift", "Control", "Alt")

Clock = Callable[[], float]


@dataclass(frozen=True)
class KeystrokeEvent:
    """A single recorded keystroke, as appended to the engine's event log."""

    key: str
    target: Optional[str]
    is_correct: bool
    timestamp: float
    position: int
    time_delta: float = 0.0

    @property
    def is_deletion(self) -> bool:
        return self.key == BACKSPACE

    @property
    def is_character(self) -> bool:
        """True for single-character content keystrokes."""
        return len(self.key) == 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeystrokeEvent":
        """Create from dictionary."""
        return cls(**data)


@dataclass(frozen=True)
class CorrectionEvent:
    timestamp: float
    position: int
    correction_index: int


@dataclass(frozen=True)
class PauseEvent:
    timestamp: float
    duration: float
    position: int


class ConfigManager:
    """Configuration management with validation."""

    def __init__(self, config_path: Union[str, Path] = "config.yaml"):
        self.config_path = Path(config_path)
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and validate configuration."""
        try:
            with open(self.config_path, "r") as f:
                config = yaml.safe_load(f)
        except FileNotFoundError:
            logging.warning(f"Config file {self.config_path} not found, using defaults")
            return self._default_config()
        except yaml.YAMLError as e:
            logging.error(f"Error parsing config file: {e}")
            return self._default_config()

        if not isinstance(config, dict):
            logging.warning(f"Config file {self.config_path} is empty, using defaults")
            return self._default_config()
        return config

    def _default_config(self) -> Dict[str, Any]:
        """Default configuration values."""
        return {
            "analytics": {
                "rhythm_min_samples": 10,
                "rhythm_max_interval_ms": 2000,
                "pause_threshold_ms": 1000,
                "correction_bonus_cap": 5,
                "problem_character_limit": 5,
                "min_tips": 4,
                "max_tips": 6,
            },
            "output": {
                "reports_directory": "./reports",
                "log_level": "INFO",
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with dot notation."""
        keys = key.split(".")
        value = self.config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for the application."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def system_clock() -> float:
    """Current wall-clock time in milliseconds."""
    return time.time() * 1000


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 upwards, the way the results screen displays numbers."""
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5) / scale
    return int(rounded) if digits == 0 else rounded


def char_label(char: str) -> str:
    """Readable label for a character in prose (space is invisible)."""
    return "SPACE" if char == " " else char


def compute_wpm(text: str, elapsed_seconds: float) -> int:
    """Words per minute from typed text, counting whitespace-separated words."""
    if not elapsed_seconds or elapsed_seconds <= 0:
        return 0
    words = len(text.split())
    return round_half_up(words / elapsed_seconds * 60)


def format_time(seconds: int) -> str:
    """Format seconds as m:ss."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


def classify_char(char: str) -> str:
    if re.match(r"[a-zA-Z]", char):
        return "letters"
    if re.match(r"[0-9]", char):
        return "numbers"
    return "symbols"


def build_char_stats(typed: str, target: str) -> Dict[str, Dict[str, int]]:
    """Attempted/correct counts per character class over the overlapping prefix."""
    stats: Dict[str, Dict[str, int]] = {
        group: {"attempted": 0, "correct": 0}
        for group in ("letters", "numbers", "symbols")
    }
    for typed_char, target_char in zip(typed, target):
        group = stats[classify_char(target_char)]
        group["attempted"] += 1
        if typed_char == target_char:
            group["correct"] += 1
    return stats


def pct(correct: int, attempted: int) -> int:
    return round_half_up(correct / attempted * 100) if attempted else 0
