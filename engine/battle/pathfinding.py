"""
Battle pathfinding module.

Bounded single-source shortest paths over the battle grid, route
reconstruction, and "get close to X" searches used by movement previews
and bot policies.

Supports 8-directional movement; a diagonal step costs sqrt(2).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterator, List, Optional, Tuple

from settings import (
    ADJACENT_PROXIMITY_RADIUS,
    DIAGONAL_STEP_COST,
    EXPLORATION_RANGE,
    ORTHOGONAL_STEP_COST,
)
from engine.battle.grid import BattleGrid
from engine.battle.types import Position
from engine.error_handler import PathfindingError


NEIGHBOR_STEPS: Tuple[Tuple[int, int, float], ...] = (
    (-1, -1, DIAGONAL_STEP_COST),
    (-1, 0, ORTHOGONAL_STEP_COST),
    (-1, 1, DIAGONAL_STEP_COST),
    (0, -1, ORTHOGONAL_STEP_COST),
    (0, 1, ORTHOGONAL_STEP_COST),
    (1, -1, DIAGONAL_STEP_COST),
    (1, 0, ORTHOGONAL_STEP_COST),
    (1, 1, DIAGONAL_STEP_COST),
)


@dataclass(frozen=True)
class FrontierRecord:
    """Settled distance of one explored cell and the cell it was reached from."""
    distance_from_start: float
    came_from: Position


@dataclass
class Route:
    """
    A path from start to destination, both included.

    `positions` holds (cumulative distance, cell) pairs in walking order.
    """
    total_distance: float
    positions: List[Tuple[float, Position]]

    @property
    def start(self) -> Position:
        return self.positions[0][1]

    @property
    def destination(self) -> Position:
        return self.positions[-1][1]

    def cells(self) -> List[Position]:
        return [pos for _, pos in self.positions]


Frontier = Dict[Position, FrontierRecord]


def explore(grid: BattleGrid, start: Tuple[int, int], max_range: float) -> Frontier:
    """
    Find the cheapest distance to every cell reachable from `start` within
    `max_range`.

    Work items are processed in FIFO order. A cell may be settled more than
    once; a later settlement only wins if it is strictly shorter, so the
    result matches a priority-ordered Dijkstra. The start cell is exempt
    from the blocked check (it is usually occupied by the mover).
    """
    start = Position(*start)
    routes: Frontier = {}
    queue: Deque[Tuple[Position, float, Position]] = deque([(start, 0.0, start)])

    while queue:
        node, dist, came_from = queue.popleft()

        prev = routes.get(node)
        if prev is not None and prev.distance_from_start <= dist:
            # We already know a route to this node that is at least as short
            continue

        routes[node] = FrontierRecord(distance_from_start=dist, came_from=came_from)

        x, y = node
        for dx, dy, step in NEIGHBOR_STEPS:
            neighbor = Position(x + dx, y + dy)
            neighbor_dist = dist + step
            if neighbor_dist <= max_range and grid.is_free(neighbor):
                queue.append((neighbor, neighbor_dist, node))

    return routes


def build_route(frontier: Frontier, start: Tuple[int, int], destination: Tuple[int, int]) -> Route:
    """
    Reconstruct the route to `destination` from an exploration result.

    Raises:
        PathfindingError: if the destination was never reached
    """
    start = Position(*start)
    destination = Position(*destination)
    record = frontier.get(destination)
    if record is None:
        raise PathfindingError(f"No route to {destination}: it was not reached from {start}")

    positions: List[Tuple[float, Position]] = [(record.distance_from_start, destination)]
    pos = destination
    while pos != start and record.came_from != pos:
        pos = record.came_from
        record = frontier[pos]
        positions.insert(0, (record.distance_from_start, pos))

    return Route(total_distance=positions[-1][0], positions=positions)


class PathfindGrid:
    """
    Pathfinding service over one battle grid.

    Keeps the result of the last `run` for movement previews; the
    `find_*` searches explore from scratch and leave it untouched.
    """

    def __init__(self, grid: BattleGrid):
        self.grid = grid
        self.routes: Frontier = {}
        self._origin: Optional[Position] = None

    def run(self, start: Tuple[int, int], max_range: float) -> Frontier:
        """Explore from `start` and remember the result as the current preview."""
        self._origin = Position(*start)
        self.routes = explore(self.grid, start, max_range)
        return self.routes

    def reachable_cells(self) -> Iterator[Position]:
        """Cells of the current preview, the origin excluded."""
        for pos in self.routes:
            if pos != self._origin:
                yield pos

    def route_to(self, destination: Tuple[int, int]) -> Optional[Route]:
        """Route to a cell of the current preview, or None if it is out of reach."""
        if self._origin is None or Position(*destination) not in self.routes:
            return None
        return build_route(self.routes, self._origin, destination)

    def find_shortest_path_to_proximity(
        self,
        start: Tuple[int, int],
        target: Tuple[int, int],
        proximity_radius: float,
        exploration_range: float,
    ) -> Optional[Route]:
        """
        Cheapest route from `start` to any cell within `proximity_radius`
        (straight line) of `target`.

        Ties keep the first minimum in exploration order.
        """
        frontier = explore(self.grid, start, exploration_range)
        target = Position(*target)
        radius_sq = proximity_radius * proximity_radius

        best: Optional[Position] = None
        best_dist = float("inf")
        for pos, record in frontier.items():
            if pos.squared_distance_to(target) <= radius_sq and record.distance_from_start < best_dist:
                best = pos
                best_dist = record.distance_from_start

        if best is None:
            return None
        return build_route(frontier, start, best)

    def find_shortest_path_to_adjacent(
        self,
        start: Tuple[int, int],
        target: Tuple[int, int],
        exploration_range: float = EXPLORATION_RANGE,
    ) -> Optional[Route]:
        return self.find_shortest_path_to_proximity(
            start, target, ADJACENT_PROXIMITY_RADIUS, exploration_range
        )

    def find_shortest_path_to(
        self,
        start: Tuple[int, int],
        destination: Tuple[int, int],
        exploration_range: float = EXPLORATION_RANGE,
    ) -> Optional[Route]:
        return self.find_shortest_path_to_proximity(start, destination, 0.0, exploration_range)
