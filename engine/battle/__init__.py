"""
Battle engine module.

This module contains the tactical core, split into logical components:
- types.py: Positions, actors, behaviour variants and actions
- grid.py: The blocked-cell grid model
- pathfinding.py: Exploration, route building and proximity searches
- state.py: BattleState, the actors and grid of one encounter
- reactions.py: Usable reactions and the bot reaction policies
- ai/: Bot decision policies
"""

from .grid import BattleGrid
from .pathfinding import FrontierRecord, PathfindGrid, Route, build_route, explore
from .state import BattleState
from .types import Actor, Position

__all__ = [
    "Actor",
    "BattleGrid",
    "BattleState",
    "FrontierRecord",
    "PathfindGrid",
    "Position",
    "Route",
    "build_route",
    "explore",
]
