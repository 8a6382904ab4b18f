"""
Battle reaction module.

Reactions are offered to a defender mid-turn:
- on-attacked reactions (parry, side step) when an attack is declared
- on-hit reactions (rage, shield bash) after the attack has landed

Which reactions are usable is decided by the actor (AP threshold, melee
context, conditions). The bot policies here just pick from that list.
"""

from typing import List, Optional, TYPE_CHECKING

from systems.abilities import OnAttackedReaction, OnHitReaction

if TYPE_CHECKING:
    from engine.battle.state import BattleState


def usable_attack_reactions(state: "BattleState", reactor_id: int, is_within_melee: bool) -> List[OnAttackedReaction]:
    return state.get(reactor_id).usable_on_attacked_reactions(is_within_melee)


def usable_hit_reactions(state: "BattleState", reactor_id: int, is_within_melee: bool) -> List[OnHitReaction]:
    return state.get(reactor_id).usable_on_hit_reactions(is_within_melee)


def bot_choose_attack_reaction(
    state: "BattleState", reactor_id: int, is_within_melee: bool
) -> Optional[OnAttackedReaction]:
    """First usable on-attacked reaction, or None."""
    reactions = usable_attack_reactions(state, reactor_id, is_within_melee)
    return reactions[0] if reactions else None


def bot_choose_hit_reaction(
    state: "BattleState", reactor_id: int, is_within_melee: bool
) -> Optional[OnHitReaction]:
    """First usable on-hit reaction, or None."""
    reactions = usable_hit_reactions(state, reactor_id, is_within_melee)
    return reactions[0] if reactions else None
