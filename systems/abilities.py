# systems/abilities.py

from dataclasses import dataclass
from typing import Optional, Literal, Dict

from settings import MELEE_RANGE
from .conditions import Condition, BLEEDING, HORRIFIED


SpellEffect = Literal["heal", "damage"]
ReactionEffect = Literal["parry", "side_step", "rage", "shield_bash"]


@dataclass(frozen=True)
class OnAttackedReaction:
    """Reaction offered to a defender when an attack is declared against it."""
    name: str
    action_point_cost: int
    effect: ReactionEffect


@dataclass(frozen=True)
class OnHitReaction:
    """Reaction offered to a defender after an attack has hit it."""
    name: str
    action_point_cost: int
    effect: ReactionEffect


@dataclass(frozen=True)
class AttackEnhancement:
    name: str
    action_point_cost: int
    bonus_damage: int = 0


@dataclass(frozen=True)
class Weapon:
    """
    Weapon held in the main hand.

    - range:          reach in cells, measured center to center
    - on_attacked_reaction: reaction the weapon grants its wielder
    """
    name: str
    action_point_cost: int
    damage: int
    range: float = MELEE_RANGE
    on_attacked_reaction: Optional[OnAttackedReaction] = None

    @property
    def is_melee(self) -> bool:
        return self.range <= MELEE_RANGE


@dataclass(frozen=True)
class Shield:
    name: str
    on_hit_reaction: Optional[OnHitReaction] = None


@dataclass(frozen=True)
class Spell:
    """
    Targeted spell.

    - id:           registry key
    - effect:       "heal" restores `amount` health, "damage" removes it
    - range:        reach in cells, measured center to center
    - inflicts:     name of the condition applied to the target, if any
    """
    id: str
    name: str
    action_point_cost: int
    mana_cost: int
    range: float
    effect: SpellEffect
    amount: int = 0
    inflicts: Optional[str] = None

    def make_condition(self) -> Optional[Condition]:
        if self.inflicts is None:
            return None
        return Condition(name=self.inflicts)


SPELLS: Dict[str, Spell] = {}


def register(spell: Spell) -> Spell:
    """
    Register a spell in the global registry and return it.
    """
    SPELLS[spell.id] = spell
    return spell


# --- Reactions --------------------------------------------------------------

PARRY = OnAttackedReaction(name="Parry", action_point_cost=1, effect="parry")
SIDE_STEP = OnAttackedReaction(name="Side step", action_point_cost=1, effect="side_step")
RAGE = OnHitReaction(name="Rage", action_point_cost=1, effect="rage")
SHIELD_BASH = OnHitReaction(name="Shield bash", action_point_cost=1, effect="shield_bash")


# --- Equipment --------------------------------------------------------------

DAGGER = Weapon(name="Dagger", action_point_cost=1, damage=1)
SWORD = Weapon(name="Sword", action_point_cost=2, damage=2, on_attacked_reaction=PARRY)
BOW = Weapon(name="Bow", action_point_cost=2, damage=2, range=6.0)

SMALL_SHIELD = Shield(name="Small shield", on_hit_reaction=SHIELD_BASH)


# --- Spells -----------------------------------------------------------------

MAGI_HEAL = register(
    Spell(
        id="magi_heal",
        name="Heal",
        action_point_cost=3,
        mana_cost=1,
        range=5.0,
        effect="heal",
        amount=3,
    )
)

MAGI_INFLICT_WOUNDS = register(
    Spell(
        id="magi_inflict_wounds",
        name="Inflict wounds",
        action_point_cost=3,
        mana_cost=1,
        range=5.0,
        effect="damage",
        amount=1,
        inflicts=BLEEDING,
    )
)

MAGI_INFLICT_HORRORS = register(
    Spell(
        id="magi_inflict_horrors",
        name="Inflict horrors",
        action_point_cost=3,
        mana_cost=1,
        range=5.0,
        effect="damage",
        amount=0,
        inflicts=HORRIFIED,
    )
)

FIREBALL = register(
    Spell(
        id="fireball",
        name="Fireball",
        action_point_cost=3,
        mana_cost=2,
        range=6.0,
        effect="damage",
        amount=3,
    )
)
