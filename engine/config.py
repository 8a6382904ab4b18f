"""
Engine configuration: tunables that can be overridden from a JSON file.
"""

import json
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

import settings
from engine.error_handler import ValidationError, log_error, logger

# Config file location
CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"
CONFIG_FILE = CONFIG_DIR / "engine.json"


class EngineConfig:
    """Manages battle engine configuration."""

    def __init__(self) -> None:
        self.exploration_range: float = settings.EXPLORATION_RANGE
        self.grid_width: int = settings.BATTLE_GRID_WIDTH
        self.grid_height: int = settings.BATTLE_GRID_HEIGHT
        self.fps: int = settings.FPS
        self.telemetry_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary for saving."""
        return {
            "exploration_range": self.exploration_range,
            "grid_width": self.grid_width,
            "grid_height": self.grid_height,
            "fps": self.fps,
            "telemetry_enabled": self.telemetry_enabled,
        }

    def from_dict(self, data: Dict[str, Any]) -> None:
        """
        Load config from dictionary.

        Raises:
            ValidationError: if a value is not a number or out of its allowed range
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Engine config must be a JSON object, got {type(data).__name__}")
        try:
            exploration_range = float(data.get("exploration_range", settings.EXPLORATION_RANGE))
            grid_width = int(data.get("grid_width", settings.BATTLE_GRID_WIDTH))
            grid_height = int(data.get("grid_height", settings.BATTLE_GRID_HEIGHT))
            fps = int(data.get("fps", settings.FPS))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid engine config value: {e}") from e

        if exploration_range < 0:
            raise ValidationError(f"exploration_range must be >= 0, got {exploration_range}")
        if grid_width <= 0 or grid_height <= 0:
            raise ValidationError(f"grid dimensions must be positive, got {grid_width}x{grid_height}")
        if fps <= 0:
            raise ValidationError(f"fps must be positive, got {fps}")

        self.exploration_range = exploration_range
        self.grid_width = grid_width
        self.grid_height = grid_height
        self.fps = fps
        self.telemetry_enabled = bool(data.get("telemetry_enabled", True))

    def get_grid_dimensions(self) -> Tuple[int, int]:
        return (self.grid_width, self.grid_height)

    def save(self, path: Optional[Path] = None) -> bool:
        """Save config to file."""
        target = path or CONFIG_FILE
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open("w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2)
            return True
        except OSError as e:
            log_error(e, "config_save")
            return False

    def load(self, path: Optional[Path] = None) -> bool:
        """
        Load config from file. A missing file keeps the defaults.

        Raises:
            ValidationError: if the file holds invalid values
        """
        source = path or CONFIG_FILE
        if not source.exists():
            return False

        try:
            with source.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log_error(e, "config_load")
            return False

        self.from_dict(data)
        logger.info(f"Loaded engine config from {source}")
        return True


# Global config instance
_config = EngineConfig()


def get_config() -> EngineConfig:
    """Get the global config instance."""
    return _config


def load_config(path: Optional[Path] = None) -> EngineConfig:
    """Load and return the config."""
    _config.load(path)
    return _config


def save_config(path: Optional[Path] = None) -> bool:
    """Save the global config."""
    return _config.save(path)
