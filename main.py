import argparse
import random
import sys
from pathlib import Path
from typing import Optional, Tuple

import pygame

from settings import TITLE
from engine.battle.ai import BattleAI
from engine.battle.state import BattleState
from engine.battle.types import (
    Actor,
    AttackAction,
    CastSpellAction,
    FighterBehaviour,
    GoalDirectedBehaviour,
    MoveAction,
    ReactiveBehaviour,
)
from engine.config import get_config, load_config
from engine.core.frame_loop import FrameScheduler
from engine.core.headless import HeadlessPresenter
from engine.error_handler import ValidationError, logger
from engine.managers.battle_orchestrator import DecisionOutcome, GameEvent, TurnOrchestrator
from systems.abilities import BOW, DAGGER, MAGI_HEAL, MAGI_INFLICT_HORRORS, MAGI_INFLICT_WOUNDS, SWORD, SMALL_SHIELD
from systems.conditions import add_condition
from telemetry.logger import telemetry


def build_skirmish(grid_dimensions: Optional[Tuple[int, int]] = None) -> BattleState:
    """Two bot parties facing each other across a few rocks."""
    if grid_dimensions is None:
        grid_dimensions = get_config().get_grid_dimensions()
    actors = [
        Actor(id=1, name="Fighter", side="player", position=(1, 5), max_hp=12, weapon=SWORD,
              shield=SMALL_SHIELD, behaviour=FighterBehaviour()),
        Actor(id=2, name="Archer", side="player", position=(1, 7), max_hp=8, weapon=BOW,
              behaviour=ReactiveBehaviour(flees_melee=True)),
        Actor(id=3, name="Ghoul", side="enemy", position=(13, 4), max_hp=9, weapon=DAGGER,
              behaviour=ReactiveBehaviour()),
        Actor(id=4, name="Magi", side="enemy", position=(14, 6), max_hp=7, max_mana=6,
              spells=[MAGI_HEAL, MAGI_INFLICT_WOUNDS, MAGI_INFLICT_HORRORS],
              behaviour=GoalDirectedBehaviour()),
    ]
    return BattleState(actors, grid_dimensions, obstacles=[(7, 4), (7, 5), (8, 7)])


def show(orchestrator: TurnOrchestrator, scheduler: FrameScheduler, state: BattleState, event: GameEvent) -> None:
    orchestrator.notify_event(event, state)
    scheduler.run_until_idle(orchestrator)


def decide(orchestrator: TurnOrchestrator, scheduler: FrameScheduler, outcome: Optional[DecisionOutcome]):
    if outcome is None:
        outcome = scheduler.run_until_idle(orchestrator)
    return outcome.value if outcome is not None else None


def apply_action(orchestrator: TurnOrchestrator, scheduler: FrameScheduler, state: BattleState, action) -> None:
    """Minimal rules so the demo battle can progress."""
    actor = state.active_actor

    if isinstance(action, MoveAction):
        actor.action_points -= action.action_point_cost
        for pos in action.positions:
            state.move_actor(actor.id, pos)
        show(orchestrator, scheduler, state, GameEvent("moved", actor=actor.id, details={"to": tuple(actor.position)}))

    elif isinstance(action, AttackAction):
        target = state.get(action.target)
        actor.action_points -= actor.weapon.action_point_cost
        within_melee = actor.position.is_within_melee(target.position)
        reaction = decide(orchestrator, scheduler, orchestrator.request_attack_reaction(
            state, actor.id, action.hand, target.id, within_melee))
        if reaction is not None:
            target.action_points -= reaction.action_point_cost
            show(orchestrator, scheduler, state, GameEvent("reacted", actor=target.id, details={"reaction": reaction.name}))
            return
        target.hp = max(0, target.hp - actor.weapon.damage)
        show(orchestrator, scheduler, state, GameEvent("attacked", actor=actor.id, target=target.id,
                                                       details={"damage": actor.weapon.damage}))
        if target.is_alive:
            hit_reaction = decide(orchestrator, scheduler, orchestrator.request_hit_reaction(
                state, actor.id, target.id, actor.weapon.damage, within_melee))
            if hit_reaction is not None:
                target.action_points -= hit_reaction.action_point_cost
        else:
            state.remove_actor(target.id)
            show(orchestrator, scheduler, state, GameEvent("died", actor=target.id))

    elif isinstance(action, CastSpellAction):
        target = state.get(action.target)
        spell = action.spell
        actor.action_points -= spell.action_point_cost
        actor.mana -= spell.mana_cost
        if spell.effect == "heal":
            target.hp = min(target.max_hp, target.hp + spell.amount)
        else:
            target.hp = max(0, target.hp - spell.amount)
        condition = spell.make_condition()
        if condition is not None:
            add_condition(target.conditions, condition)
        show(orchestrator, scheduler, state, GameEvent("cast", actor=actor.id, target=target.id,
                                                       details={"spell": spell.name}))
        if not target.is_alive:
            state.remove_actor(target.id)


def run_battle(seed: int, max_rounds: int) -> str:
    state = build_skirmish()
    orchestrator = TurnOrchestrator(HeadlessPresenter(), BattleAI(rng=random.Random(seed)))
    scheduler = FrameScheduler(fps=0)
    state.active_actor.start_turn()

    while state.round <= max_rounds:
        if not any(state.player_actors()):
            return "defeat"
        if not any(state.enemy_actors()):
            return "victory"

        actions_taken = 0
        while actions_taken < 4:
            action = decide(orchestrator, scheduler, orchestrator.request_action(state))
            if action is None:
                break
            apply_action(orchestrator, scheduler, state, action)
            actions_taken += 1
        state.next_turn()

    return "stalemate"


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=f"{TITLE}: run a headless bot-vs-bot skirmish")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--rounds", type=int, default=30)
    parser.add_argument("--telemetry", type=Path, help="append decisions and transitions to this JSONL file")
    args = parser.parse_args(argv)

    try:
        config = load_config()
    except ValidationError as e:
        logger.error(str(e))
        print(e.user_message, file=sys.stderr)
        return 1

    pygame.init()
    telemetry.enabled = config.telemetry_enabled
    if args.telemetry is not None and telemetry.enabled:
        telemetry.init(args.telemetry)
    try:
        result = run_battle(args.seed, args.rounds)
    finally:
        pygame.quit()

    logger.info(f"Skirmish finished: {result}")
    print(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
