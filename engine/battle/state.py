"""
Battle state.

Owns the actors of an encounter and the grid they stand on, and is the
only place that mutates the grid's blocked cells. Policies and the
orchestrator read from it.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from settings import BATTLE_GRID_HEIGHT, BATTLE_GRID_WIDTH
from engine.battle.grid import BattleGrid
from engine.battle.pathfinding import PathfindGrid
from engine.battle.types import Actor, ActorId, Position
from engine.error_handler import BattleError, logger


class BattleState:
    """
    Actors, turn order and the pathfinding grid of one encounter.

    Turn order is the order actors were given in.
    """

    def __init__(
        self,
        actors: Iterable[Actor],
        grid_dimensions: Tuple[int, int] = (BATTLE_GRID_WIDTH, BATTLE_GRID_HEIGHT),
        obstacles: Iterable[Tuple[int, int]] = (),
    ):
        self._actors: Dict[ActorId, Actor] = {}
        self._turn_order: List[ActorId] = []
        for actor in actors:
            if actor.id in self._actors:
                raise BattleError(f"Duplicate actor id {actor.id}")
            self._actors[actor.id] = actor
            self._turn_order.append(actor.id)

        self.grid = BattleGrid(*grid_dimensions)
        self.obstacles = [Position(*pos) for pos in obstacles]
        self.grid.rebuild(list(self.obstacles) + [a.position for a in self._actors.values()])
        self.pathfind_grid = PathfindGrid(self.grid)

        self.active_actor_id: ActorId = self._turn_order[0] if self._turn_order else -1
        # Where the turn order resumes if the active actor is removed mid-turn
        self._resume_index = 0
        self.round = 1

    # --- lookup -------------------------------------------------------------

    def get(self, actor_id: ActorId) -> Actor:
        return self._actors[actor_id]

    def contains_alive(self, actor_id: ActorId) -> bool:
        actor = self._actors.get(actor_id)
        return actor is not None and actor.is_alive

    def actors(self) -> Iterator[Actor]:
        """Living actors in turn order."""
        for actor_id in self._turn_order:
            actor = self._actors[actor_id]
            if actor.is_alive:
                yield actor

    @property
    def active_actor(self) -> Actor:
        return self._actors[self.active_actor_id]

    def is_human_controlled(self, actor_id: ActorId) -> bool:
        return self._actors[actor_id].is_human_controlled

    def is_players_turn(self) -> bool:
        return self.active_actor.is_human_controlled

    def player_actors(self) -> Iterator[Actor]:
        return (a for a in self.actors() if a.side == "player")

    def enemy_actors(self) -> Iterator[Actor]:
        return (a for a in self.actors() if a.side == "enemy")

    def opponents_of(self, actor: Actor) -> Iterator[Actor]:
        return (a for a in self.actors() if a.side != actor.side)

    def allies_of(self, actor: Actor, include_self: bool = True) -> Iterator[Actor]:
        return (
            a for a in self.actors()
            if a.side == actor.side and (include_self or a.id != actor.id)
        )

    # --- mutation -----------------------------------------------------------

    def move_actor(self, actor_id: ActorId, destination: Tuple[int, int]) -> None:
        """Move an actor and keep the grid in sync."""
        actor = self._actors[actor_id]
        destination = Position(*destination)
        self.grid.move(actor.position, destination)
        actor.position = destination

    def remove_actor(self, actor_id: ActorId) -> Actor:
        """Take a dead or fled actor off the grid and out of the turn order."""
        actor = self._actors.pop(actor_id)
        index = self._turn_order.index(actor_id)
        if actor_id == self.active_actor_id:
            # The next actor now sits at the removed actor's index
            self._resume_index = index
        elif self.active_actor_id not in self._actors and index < self._resume_index:
            self._resume_index -= 1
        self._turn_order.pop(index)
        self.grid.unblock(actor.position)
        logger.debug(f"Removed {actor.name} ({actor_id}) from the encounter")
        return actor

    def add_obstacle(self, pos: Tuple[int, int]) -> None:
        pos = Position(*pos)
        self.grid.block(pos)
        self.obstacles.append(pos)

    def remove_obstacle(self, pos: Tuple[int, int]) -> None:
        pos = Position(*pos)
        self.grid.unblock(pos)
        self.obstacles.remove(pos)

    def next_turn(self) -> Optional[Actor]:
        """
        Hand the turn to the next living actor and refill its action points.

        Returns the new active actor, or None if nobody is left.
        """
        living = [a.id for a in self.actors()]
        if not living:
            return None

        if self.active_actor_id in self._turn_order:
            i = self._turn_order.index(self.active_actor_id)
        else:
            i = self._resume_index - 1
        n = len(self._turn_order)
        for step in range(1, n + 1):
            candidate = self._turn_order[(i + step) % n]
            if candidate in living:
                if (i + step) >= n:
                    self.round += 1
                self.active_actor_id = candidate
                break

        actor = self.active_actor
        actor.start_turn()
        return actor
