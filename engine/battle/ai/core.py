"""
Core battle AI module.

Contains the BattleAI class that answers every bot decision: which action
to take on its turn, and how to react to attacks and hits.
"""

from __future__ import annotations

import math
import random
from typing import Optional

from engine.battle.pathfinding import Route
from engine.battle.reactions import bot_choose_attack_reaction, bot_choose_hit_reaction
from engine.battle.state import BattleState
from engine.battle.types import Action, Actor, ActorId, MoveAction
from engine.config import get_config
from engine.error_handler import BattleError, logger
from systems.abilities import OnAttackedReaction, OnHitReaction
from telemetry.logger import telemetry

from .profiles import get_ai_profile_handler

# Float slack when turning a distance into whole action points
COST_EPSILON = 1e-9


class BattleAI:
    """
    Decision maker for bot-controlled actors.

    Every call is synchronous and bounded. Randomness comes from `rng` so
    callers can seed it.
    """

    def __init__(self, rng: Optional[random.Random] = None, exploration_range: Optional[float] = None):
        """
        Args:
            rng: Random source for all bot choices (a fresh one if omitted)
            exploration_range: How far route searches look; defaults to the config value
        """
        self.rng = rng or random.Random()
        if exploration_range is None:
            exploration_range = get_config().exploration_range
        self.exploration_range = exploration_range

    def choose_action(self, state: BattleState) -> Optional[Action]:
        """
        Choose the active actor's next action, or None to pass.

        Raises:
            BattleError: if the active actor is human-controlled
        """
        bot = state.active_actor
        if bot.is_human_controlled:
            raise BattleError(f"{bot.name} is human-controlled; bots cannot choose for it")

        handler = get_ai_profile_handler(bot.behaviour)
        action = handler.choose_action(bot, state, self)
        logger.debug(f"{bot.name} ({handler.profile_name}) chose: {action!r}")
        telemetry.log_decision(bot.id, "choose_action", action, source=handler.profile_name)
        return action

    def choose_attack_reaction(
        self, state: BattleState, reactor_id: ActorId, is_within_melee: bool
    ) -> Optional[OnAttackedReaction]:
        reaction = bot_choose_attack_reaction(state, reactor_id, is_within_melee)
        telemetry.log_decision(reactor_id, "choose_attack_reaction", reaction, source="bot")
        return reaction

    def choose_hit_reaction(
        self, state: BattleState, reactor_id: ActorId, is_within_melee: bool
    ) -> Optional[OnHitReaction]:
        reaction = bot_choose_hit_reaction(state, reactor_id, is_within_melee)
        telemetry.log_decision(reactor_id, "choose_hit_reaction", reaction, source="bot")
        return reaction

    def convert_path_to_move_action(self, actor: Actor, route: Route) -> Optional[MoveAction]:
        return convert_path_to_move_action(actor, route)


def convert_path_to_move_action(actor: Actor, route: Route) -> Optional[MoveAction]:
    """
    Cut a route down to what the actor can afford this turn.

    The start cell is dropped. A waypoint is affordable while its cumulative
    distance fits in action points x movement speed; the AP cost is the last
    affordable distance divided by speed, rounded up. Returns None when not
    even the first step is affordable.
    """
    affordable = actor.remaining_movement
    positions = []
    total_distance = 0.0
    for dist, pos in route.positions[1:]:
        if dist > affordable:
            break
        positions.append(pos)
        total_distance = dist

    if not positions:
        return None

    action_point_cost = min(
        actor.action_points,
        math.ceil(total_distance / actor.movement_speed - COST_EPSILON),
    )
    return MoveAction(
        positions=positions,
        action_point_cost=action_point_cost,
        total_distance=total_distance,
    )
