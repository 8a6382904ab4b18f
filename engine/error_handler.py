"""
Centralized error handling and logging for the battle core.

This module provides:
- The "tactics" logger (daily log file + console warnings)
- Exception types for the different failure categories
- A helper to log an error together with where it happened
"""
import logging
import os
import traceback
from pathlib import Path
from typing import Optional
from datetime import datetime

# Setup logging directory
LOG_DIR = Path(os.environ.get("TACTICS_LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Configure logger
logger = logging.getLogger("tactics")
logger.setLevel(logging.DEBUG)

# Prevent duplicate handlers
if not logger.handlers:
    # File handler for detailed logs
    log_file = LOG_DIR / f"battle_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    )

    # Console handler for warnings/errors
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter('%(levelname)s: %(message)s')
    )

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)


class GameError(Exception):
    """Base exception for game-specific errors."""
    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class BattleError(GameError):
    """Error during battle operations."""
    pass


class GridError(BattleError):
    """A cell was blocked twice, or unblocked without being blocked."""
    pass


class PathfindingError(BattleError):
    """A route was requested to a cell the explorer never reached."""
    pass


class OrchestrationError(BattleError):
    """A decision outcome or request arrived out of turn."""
    pass


class ValidationError(GameError):
    """Error when validation fails."""
    pass


def log_error(
    error: Exception,
    context: str = "",
) -> None:
    """
    Log an error with context information.

    Args:
        error: The exception that occurred
        context: Where the error occurred (e.g., "orchestrator_submit", "config_load")
    """
    error_type = type(error).__name__
    error_msg = str(error)
    trace = traceback.format_exc()

    logger.error(f"Error in {context}: {error_type}: {error_msg}\n{trace}")
