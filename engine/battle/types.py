"""
Battle type definitions.

Contains dataclasses and type aliases used throughout the battle system.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, List, NamedTuple, Optional, Tuple, Union

from settings import ACTION_POINTS_PER_TURN, BASE_MOVEMENT_SPEED, REACTION_AP_THRESHOLD
from systems.abilities import (
    AttackEnhancement,
    OnAttackedReaction,
    OnHitReaction,
    Shield,
    Spell,
    Weapon,
)
from systems.conditions import Condition, RAGING, has_condition, is_bleeding, tick_conditions


# Type aliases
Side = Literal["player", "enemy"]
HandType = Literal["main_hand", "off_hand"]
ActorId = int


class Position(NamedTuple):
    """A grid cell. Bounds belong to the grid, not to the position."""
    x: int
    y: int

    def squared_distance_to(self, other: Tuple[int, int]) -> int:
        dx = self[0] - other[0]
        dy = self[1] - other[1]
        return dx * dx + dy * dy

    def distance_to(self, other: Tuple[int, int]) -> float:
        """Straight-line distance between cell centers."""
        return math.sqrt(self.squared_distance_to(other))

    def is_within_melee(self, other: Tuple[int, int]) -> bool:
        """True when the two cells touch, diagonals included."""
        return self != other and max(abs(self[0] - other[0]), abs(self[1] - other[1])) <= 1


# --- Behaviour variants -----------------------------------------------------
#
# Each actor carries exactly one of these. Bot policies keep their
# cross-turn memory on the variant itself and nowhere else.


@dataclass
class HumanControlled:
    """Decisions come from the player through the presentation layer."""
    pass


@dataclass
class ReactiveBehaviour:
    """
    Attacks whatever is in reach, otherwise closes in on the nearest opponent.

    With `flees_melee`, a ranged attacker first steps out of melee contact.
    """
    flees_melee: bool = False


@dataclass
class GoalDirectedBehaviour:
    """
    Support caster. `current_goal` is a (spell, target id) commitment that
    survives across turns until the spell lands or the target disappears.
    """
    current_goal: Optional[Tuple[Spell, ActorId]] = None


@dataclass
class FighterBehaviour:
    """Sticks to one target, with a slowly growing urge to switch."""
    current_target: Optional[ActorId] = None
    chance_of_switching_target: float = 0.0


Behaviour = Union[HumanControlled, ReactiveBehaviour, GoalDirectedBehaviour, FighterBehaviour]


# --- Actions ----------------------------------------------------------------


@dataclass
class MoveAction:
    """Walk along `positions` (start cell excluded), paying `action_point_cost`."""
    positions: List[Position]
    action_point_cost: int
    total_distance: float


@dataclass
class AttackAction:
    target: ActorId
    hand: HandType = "main_hand"
    enhancements: List[AttackEnhancement] = field(default_factory=list)


@dataclass
class CastSpellAction:
    spell: Spell
    target: ActorId
    enhancements: List[str] = field(default_factory=list)


Action = Union[MoveAction, AttackAction, CastSpellAction]


# --- Actors -----------------------------------------------------------------


@dataclass
class Actor:
    """
    A combatant on the battle grid.

    Keeps track of side, grid position, resources, equipment and behaviour.
    The battle state owns every actor; policies only read them.
    """
    id: ActorId
    name: str
    side: Side
    position: Position

    max_hp: int = 10
    hp: int = -1
    max_mana: int = 0
    mana: int = -1

    max_action_points: int = ACTION_POINTS_PER_TURN
    action_points: int = ACTION_POINTS_PER_TURN
    movement_speed: float = BASE_MOVEMENT_SPEED

    weapon: Optional[Weapon] = None
    shield: Optional[Shield] = None
    spells: List[Spell] = field(default_factory=list)
    on_attacked_reactions: List[OnAttackedReaction] = field(default_factory=list)
    on_hit_reactions: List[OnHitReaction] = field(default_factory=list)
    conditions: List[Condition] = field(default_factory=list)

    behaviour: Behaviour = field(default_factory=HumanControlled)

    def __post_init__(self):
        self.position = Position(*self.position)
        # -1 means "start full"
        if self.hp < 0:
            self.hp = self.max_hp
        if self.mana < 0:
            self.mana = self.max_mana

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def health_ratio(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return self.hp / float(self.max_hp)

    @property
    def is_human_controlled(self) -> bool:
        return isinstance(self.behaviour, HumanControlled)

    @property
    def is_bleeding(self) -> bool:
        return is_bleeding(self.conditions)

    @property
    def remaining_movement(self) -> float:
        """Distance the actor can still cover this turn."""
        return self.action_points * self.movement_speed

    # --- capability queries -------------------------------------------------

    def reaches(self, target: Tuple[int, int], reach: float) -> bool:
        return self.position.squared_distance_to(target) <= reach * reach

    def can_attack(self) -> bool:
        return self.weapon is not None and self.action_points >= self.weapon.action_point_cost

    def reaches_with_attack(self, target: Tuple[int, int]) -> bool:
        if self.weapon is None:
            return False
        return self.reaches(target, self.weapon.range)

    def can_cast(self, spell: Spell) -> bool:
        return self.action_points >= spell.action_point_cost and self.mana >= spell.mana_cost

    def reaches_with_spell(self, spell: Spell, target: Tuple[int, int]) -> bool:
        return self.reaches(target, spell.range)

    def usable_on_attacked_reactions(self, is_within_melee: bool) -> List[OnAttackedReaction]:
        """
        Reactions the actor may answer an incoming attack with.

        Parrying only works against melee attacks.
        """
        candidates = list(self.on_attacked_reactions)
        if self.weapon is not None and self.weapon.on_attacked_reaction is not None:
            candidates.append(self.weapon.on_attacked_reaction)

        usable: List[OnAttackedReaction] = []
        for reaction in candidates:
            if reaction.effect == "parry" and not is_within_melee:
                continue
            if self._affords_reaction(reaction.action_point_cost):
                usable.append(reaction)
        return usable

    def usable_on_hit_reactions(self, is_within_melee: bool) -> List[OnHitReaction]:
        """
        Reactions the actor may answer a landed hit with.

        Rage is unavailable while already raging; a shield bash needs the
        attacker in melee.
        """
        candidates = list(self.on_hit_reactions)
        if self.shield is not None and self.shield.on_hit_reaction is not None:
            candidates.append(self.shield.on_hit_reaction)

        usable: List[OnHitReaction] = []
        for reaction in candidates:
            if reaction.effect == "rage" and has_condition(self.conditions, RAGING):
                continue
            if reaction.effect == "shield_bash" and not is_within_melee:
                continue
            if self._affords_reaction(reaction.action_point_cost):
                usable.append(reaction)
        return usable

    def _affords_reaction(self, cost: int) -> bool:
        return self.action_points - cost >= REACTION_AP_THRESHOLD

    def start_turn(self) -> None:
        """Refill action points and run down timed conditions at the start of the actor's turn."""
        self.action_points = self.max_action_points
        tick_conditions(self.conditions)
