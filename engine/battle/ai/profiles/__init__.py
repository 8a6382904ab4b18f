"""
AI profile system.

One profile per bot behaviour variant. The set of variants is closed, so
profiles are looked up by the variant's type.
"""

from typing import Dict, Optional, Protocol, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core import BattleAI

from engine.battle.state import BattleState
from engine.battle.types import Action, Actor, Behaviour
from engine.error_handler import BattleError


class AIProfile(Protocol):
    """Protocol for AI profile handlers."""

    profile_name: str

    def choose_action(self, bot: Actor, state: BattleState, ai: "BattleAI") -> Optional[Action]:
        """Choose the bot's next action, or None to pass."""
        ...


class BaseAIProfile:
    """Base class for AI profiles with common functionality."""

    def __init__(self, profile_name: str):
        self.profile_name = profile_name

    def choose_action(self, bot: Actor, state: BattleState, ai: "BattleAI") -> Optional[Action]:
        return None


# Profile registry
_PROFILE_HANDLERS: Dict[type, AIProfile] = {}


def register_profile(behaviour_type: Type, handler: AIProfile) -> None:
    """Register the handler for a behaviour variant."""
    _PROFILE_HANDLERS[behaviour_type] = handler


def get_ai_profile_handler(behaviour: Behaviour) -> AIProfile:
    """
    Get the handler for an actor's behaviour.

    Raises:
        BattleError: if the behaviour has no bot profile (human control)
    """
    handler = _PROFILE_HANDLERS.get(type(behaviour))
    if handler is None:
        raise BattleError(f"No AI profile for behaviour {type(behaviour).__name__}")
    return handler


# Import profile implementations
from engine.battle.types import FighterBehaviour, GoalDirectedBehaviour, ReactiveBehaviour
from .reactive import ReactiveProfile
from .support import SupportProfile
from .fighter import FighterProfile

# Register all profiles
register_profile(ReactiveBehaviour, ReactiveProfile())
register_profile(GoalDirectedBehaviour, SupportProfile())
register_profile(FighterBehaviour, FighterProfile())
