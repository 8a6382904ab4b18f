"""
Battle AI system.

Decision policies for bot-controlled actors, one profile per behaviour
variant, all answering synchronously.
"""

from .core import BattleAI, convert_path_to_move_action
from .profiles import AIProfile, get_ai_profile_handler

__all__ = [
    # Core
    "BattleAI",
    "convert_path_to_move_action",
    # Profiles
    "AIProfile",
    "get_ai_profile_handler",
]
