"""
Support AI Profile.

Goal-directed casters: commit to one (spell, target) goal and work
towards it over as many turns as it takes.
"""

from typing import Optional, Tuple, TYPE_CHECKING

from engine.battle.state import BattleState
from engine.battle.types import Action, Actor, ActorId, CastSpellAction, GoalDirectedBehaviour
from engine.error_handler import BattleError, logger
from systems.abilities import MAGI_HEAL, MAGI_INFLICT_HORRORS, MAGI_INFLICT_WOUNDS, Spell
from ..profiles import BaseAIProfile

if TYPE_CHECKING:
    from ..core import BattleAI


class SupportProfile(BaseAIProfile):
    """Support AI: heal wounded friends, otherwise keep the opposing party bleeding."""

    def __init__(self):
        super().__init__("support")

    def choose_action(self, bot: Actor, state: BattleState, ai: "BattleAI") -> Optional[Action]:
        behaviour = bot.behaviour
        if not isinstance(behaviour, GoalDirectedBehaviour):
            raise BattleError(f"{bot.name} has no goal-directed behaviour")

        if behaviour.current_goal is not None:
            _, target_id = behaviour.current_goal
            if not state.contains_alive(target_id):
                logger.debug(f"{bot.name} drops its goal: target {target_id} is gone")
                behaviour.current_goal = None

        if behaviour.current_goal is None:
            behaviour.current_goal = self.select_goal(bot, state, ai)
            if behaviour.current_goal is None:
                return None
            logger.debug(f"{bot.name} sets a new goal: {behaviour.current_goal[0].name} on {behaviour.current_goal[1]}")

        spell, target_id = behaviour.current_goal

        if not bot.can_cast(spell):
            # Keep the goal for a later turn
            return None

        target = state.get(target_id)
        if not bot.reaches_with_spell(spell, target.position):
            route = state.pathfind_grid.find_shortest_path_to_proximity(
                bot.position, target.position, spell.range, ai.exploration_range
            )
            if route is None:
                return None
            return ai.convert_path_to_move_action(bot, route)

        behaviour.current_goal = None
        return CastSpellAction(spell=spell, target=target_id)

    def select_goal(self, bot: Actor, state: BattleState, ai: "BattleAI") -> Optional[Tuple[Spell, ActorId]]:
        """
        Pick a new goal.

        1. On a coin flip, and only if some friend is hurt: heal the most wounded friend.
        2. Else, if some opponent is not bleeding: inflict wounds on a random such opponent.
        3. Else: inflict horrors on a random opponent.
        """
        friends = list(state.allies_of(bot))
        opponents = list(state.opponents_of(bot))

        coin = ai.rng.randrange(2)
        is_healing_warranted = any(f.hp < f.max_hp for f in friends)
        if coin == 0 and is_healing_warranted:
            target = min(friends, key=lambda f: f.health_ratio)
            return (MAGI_HEAL, target.id)

        if not opponents:
            return None

        non_bleeding = [o for o in opponents if not o.is_bleeding]
        if non_bleeding:
            return (MAGI_INFLICT_WOUNDS, ai.rng.choice(non_bleeding).id)

        return (MAGI_INFLICT_HORRORS, ai.rng.choice(opponents).id)
