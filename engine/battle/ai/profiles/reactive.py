"""
Reactive AI Profile.

Melee and ranged seekers: hit whatever is in reach, otherwise close in on
the nearest opponent.
"""

from typing import List, Optional, TYPE_CHECKING

from engine.battle.pathfinding import Route
from engine.battle.state import BattleState
from engine.battle.types import Action, Actor, AttackAction, Position, ReactiveBehaviour
from engine.error_handler import logger
from ..profiles import BaseAIProfile

if TYPE_CHECKING:
    from ..core import BattleAI


class ReactiveProfile(BaseAIProfile):
    """Reactive AI: attack the first opponent in reach, else move toward the closest one."""

    def __init__(self):
        super().__init__("reactive")

    def choose_action(self, bot: Actor, state: BattleState, ai: "BattleAI") -> Optional[Action]:
        opponents = list(state.opponents_of(bot))
        is_ranged = bot.weapon is not None and not bot.weapon.is_melee

        behaviour = bot.behaviour
        if is_ranged and isinstance(behaviour, ReactiveBehaviour) and behaviour.flees_melee:
            flee = self._flee_from_melee(bot, opponents, state, ai)
            if flee is not None:
                return flee

        # First opponent in reach wins, not the closest one
        if bot.can_attack():
            for opponent in opponents:
                if bot.reaches_with_attack(opponent.position):
                    return AttackAction(target=opponent.id)

        shortest: Optional[Route] = None
        for opponent in opponents:
            if is_ranged:
                route = state.pathfind_grid.find_shortest_path_to_proximity(
                    bot.position, opponent.position, bot.weapon.range, ai.exploration_range
                )
            else:
                route = state.pathfind_grid.find_shortest_path_to_adjacent(
                    bot.position, opponent.position, ai.exploration_range
                )
            if route is None:
                continue
            if shortest is None or route.total_distance < shortest.total_distance:
                shortest = route

        if shortest is not None:
            return ai.convert_path_to_move_action(bot, shortest)

        # A bot with no reachable opponent (or no AP left) simply passes
        return None

    def _flee_from_melee(
        self, bot: Actor, opponents: List[Actor], state: BattleState, ai: "BattleAI"
    ) -> Optional[Action]:
        """Step a ranged bot out of melee, to a random neighbouring cell no opponent touches."""
        adjacent_foe = next((o for o in opponents if bot.position.is_within_melee(o.position)), None)
        if adjacent_foe is None:
            return None

        x, y = bot.position
        safe_cells = [
            Position(x + dx, y + dy)
            for dx in (-1, 0, 1)
            for dy in (-1, 0, 1)
            if (dx, dy) != (0, 0)
            and state.grid.is_free((x + dx, y + dy))
            and not any(o.position.is_within_melee((x + dx, y + dy)) for o in opponents)
        ]
        if not safe_cells:
            return None

        safe_cell = ai.rng.choice(safe_cells)
        route = state.pathfind_grid.find_shortest_path_to(bot.position, safe_cell, ai.exploration_range)
        if route is None:
            return None
        logger.debug(f"{bot.name} flees from {adjacent_foe.name} towards {safe_cell}")
        return ai.convert_path_to_move_action(bot, route)
