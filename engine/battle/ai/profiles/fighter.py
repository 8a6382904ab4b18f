"""
Fighter AI Profile.

Duelists that pick a target and stay on it, with a chance of switching
that grows every turn they don't.
"""

from typing import List, Optional, TYPE_CHECKING, Union

from settings import ADJACENT_PROXIMITY_RADIUS
from engine.battle.pathfinding import Route
from engine.battle.state import BattleState
from engine.battle.types import (
    Action,
    Actor,
    AttackAction,
    CastSpellAction,
    FighterBehaviour,
)
from engine.error_handler import BattleError, logger
from systems.abilities import Spell
from ..profiles import BaseAIProfile

if TYPE_CHECKING:
    from ..core import BattleAI


# Right after acquiring a target, switching is very rare
INITIAL_SWITCH_CHANCE = 0.01
SWITCH_CHANCE_GROWTH = 0.1

Candidate = Union[str, Spell]
ATTACK = "attack"


class FighterProfile(BaseAIProfile):
    """Fighter AI: sticky target, shuffled preference between attack and damaging spells."""

    def __init__(self):
        super().__init__("fighter")

    def choose_action(self, bot: Actor, state: BattleState, ai: "BattleAI") -> Optional[Action]:
        behaviour = bot.behaviour
        if not isinstance(behaviour, FighterBehaviour):
            raise BattleError(f"{bot.name} has no fighter behaviour")

        opponents = list(state.opponents_of(bot))
        if not opponents:
            return None

        if ai.rng.random() < 0.5:
            opponents.sort(key=lambda o: self._route_length(bot, o, state, ai))
        else:
            ai.rng.shuffle(opponents)

        if behaviour.current_target is not None and not any(o.id == behaviour.current_target for o in opponents):
            # Target must have died; force a switch
            behaviour.current_target = None
        if behaviour.current_target is None:
            behaviour.current_target = opponents[0].id

        chance = behaviour.chance_of_switching_target
        switch_target = ai.rng.random() < chance
        if switch_target:
            behaviour.chance_of_switching_target = 0.0
        elif chance == 0.0:
            behaviour.chance_of_switching_target = INITIAL_SWITCH_CHANCE
        else:
            behaviour.chance_of_switching_target = chance + SWITCH_CHANCE_GROWTH

        if switch_target:
            new_target = next((o for o in opponents if o.id != behaviour.current_target), None)
            if new_target is not None and self._route(bot, new_target, state, ai) is not None:
                logger.debug(f"{bot.name} switches target to {new_target.name}")
                behaviour.current_target = new_target.id

        target = state.get(behaviour.current_target)

        candidates: List[Candidate] = []
        if bot.can_attack():
            candidates.append(ATTACK)
        for spell in bot.spells:
            if spell.effect == "damage" and bot.can_cast(spell):
                candidates.append(spell)
        ai.rng.shuffle(candidates)

        if candidates:
            action = self._use_on(bot, candidates[0], target)
            if action is not None:
                return action

        route = self._route(bot, target, state, ai)
        if route is None:
            return None

        if bot.remaining_movement < route.total_distance:
            # Won't reach the target this turn; hit something else on the way
            for candidate in candidates:
                for opponent in opponents:
                    action = self._use_on(bot, candidate, opponent)
                    if action is not None:
                        return action

        return ai.convert_path_to_move_action(bot, route)

    def _use_on(self, bot: Actor, candidate: Candidate, target: Actor) -> Optional[Action]:
        if candidate == ATTACK:
            if bot.reaches_with_attack(target.position):
                return AttackAction(target=target.id)
        elif bot.reaches_with_spell(candidate, target.position):
            return CastSpellAction(spell=candidate, target=target.id)
        return None

    def _route(self, bot: Actor, target: Actor, state: BattleState, ai: "BattleAI") -> Optional[Route]:
        reach = bot.weapon.range if bot.weapon is not None else ADJACENT_PROXIMITY_RADIUS
        return state.pathfind_grid.find_shortest_path_to_proximity(
            bot.position, target.position, reach, ai.exploration_range
        )

    def _route_length(self, bot: Actor, target: Actor, state: BattleState, ai: "BattleAI") -> float:
        route = self._route(bot, target, state, ai)
        return route.total_distance if route is not None else float("inf")
