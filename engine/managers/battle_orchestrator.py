"""
Turn orchestration.

Decides, each time the battle needs a decision, whether a bot answers it
on the spot or the player is prompted, and turns whatever comes back into
a DecisionOutcome for the battle state to apply. Also holds the battle
while the presentation layer plays out a game event.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Protocol, TYPE_CHECKING

from engine.battle.types import ActorId, HandType
from engine.error_handler import OrchestrationError, logger
from telemetry.logger import telemetry

if TYPE_CHECKING:
    from engine.battle.ai import BattleAI
    from engine.battle.state import BattleState


class OrchestratorState(Enum):
    IDLE = "idle"
    AWAITING_ACTION = "awaiting_action"
    AWAITING_ATTACK_REACTION = "awaiting_attack_reaction"
    AWAITING_HIT_REACTION = "awaiting_hit_reaction"
    PROCESSING_EVENT = "processing_event"


class DecisionKind(Enum):
    ACTION = "choose_action"
    ATTACK_REACTION = "choose_attack_reaction"
    HIT_REACTION = "choose_hit_reaction"
    EVENT = "event"


_AWAITING_STATE = {
    DecisionKind.ACTION: OrchestratorState.AWAITING_ACTION,
    DecisionKind.ATTACK_REACTION: OrchestratorState.AWAITING_ATTACK_REACTION,
    DecisionKind.HIT_REACTION: OrchestratorState.AWAITING_HIT_REACTION,
}


@dataclass(frozen=True)
class PendingDecision:
    """The one question the orchestrator is waiting on."""
    kind: DecisionKind
    actor_id: ActorId
    attacker: Optional[ActorId] = None
    hand: Optional[HandType] = None
    damage: Optional[int] = None
    is_within_melee: bool = False


@dataclass(frozen=True)
class DecisionOutcome:
    """
    Answer to a decision request.

    `value` is the chosen action or reaction, or None for "pass" / "no
    reaction". Event completions use kind EVENT and carry no value.
    """
    kind: DecisionKind
    value: Any = None


@dataclass
class GameEvent:
    """Something that happened in the battle, for the presentation layer to show."""
    name: str
    actor: Optional[ActorId] = None
    target: Optional[ActorId] = None
    details: Dict[str, Any] = field(default_factory=dict)


class Presenter(Protocol):
    """What the orchestrator needs from the presentation layer."""

    def prompt(self, decision: PendingDecision) -> None:
        """Show the player the controls for `decision`."""
        ...

    def set_idle(self) -> None:
        """Hide any decision controls."""
        ...

    def handle_game_event(self, event: GameEvent) -> None:
        """Start showing `event` (animations, floating text, sounds)."""
        ...

    def update(self, state: Optional["BattleState"], dt: float) -> Optional[DecisionOutcome]:
        """Advance one frame; return the player's choice once one is made."""
        ...

    def has_ongoing_animation(self) -> bool:
        ...


class TurnOrchestrator:
    """
    Single-threaded state machine sequencing bot and player decisions.

    Bot decisions resolve synchronously: the request returns the outcome.
    Player decisions and event playback suspend: the request returns None,
    the frame loop calls `tick` until the orchestrator is idle again, and
    the result is collected with `take_outcome`. Only one question is ever
    outstanding.
    """

    def __init__(self, presenter: Presenter, ai: "BattleAI"):
        self.presenter = presenter
        self.ai = ai
        self._state = OrchestratorState.IDLE
        self._pending: Optional[PendingDecision] = None
        self._battle: Optional["BattleState"] = None
        self._outcome: Optional[DecisionOutcome] = None

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def pending(self) -> Optional[PendingDecision]:
        return self._pending

    @property
    def is_suspended(self) -> bool:
        return self._state != OrchestratorState.IDLE

    # --- requests -----------------------------------------------------------

    def request_action(self, battle: "BattleState") -> Optional[DecisionOutcome]:
        """Ask the active actor for its action."""
        self._ensure_idle("request_action")
        actor = battle.active_actor
        if actor.is_human_controlled:
            self._await(battle, PendingDecision(kind=DecisionKind.ACTION, actor_id=actor.id))
            return None

        action = self.ai.choose_action(battle)
        return DecisionOutcome(kind=DecisionKind.ACTION, value=action)

    def request_attack_reaction(
        self,
        battle: "BattleState",
        attacker: ActorId,
        hand: HandType,
        reactor: ActorId,
        is_within_melee: bool,
    ) -> Optional[DecisionOutcome]:
        """Ask `reactor` how it responds to an attack declared by `attacker`."""
        self._ensure_idle("request_attack_reaction")
        if battle.is_human_controlled(reactor):
            self._await(
                battle,
                PendingDecision(
                    kind=DecisionKind.ATTACK_REACTION,
                    actor_id=reactor,
                    attacker=attacker,
                    hand=hand,
                    is_within_melee=is_within_melee,
                ),
            )
            return None

        reaction = self.ai.choose_attack_reaction(battle, reactor, is_within_melee)
        return DecisionOutcome(kind=DecisionKind.ATTACK_REACTION, value=reaction)

    def request_hit_reaction(
        self,
        battle: "BattleState",
        attacker: ActorId,
        reactor: ActorId,
        damage: int,
        is_within_melee: bool,
    ) -> Optional[DecisionOutcome]:
        """Ask `reactor` how it responds to being hit for `damage`."""
        self._ensure_idle("request_hit_reaction")
        if battle.is_human_controlled(reactor):
            self._await(
                battle,
                PendingDecision(
                    kind=DecisionKind.HIT_REACTION,
                    actor_id=reactor,
                    attacker=attacker,
                    damage=damage,
                    is_within_melee=is_within_melee,
                ),
            )
            return None

        reaction = self.ai.choose_hit_reaction(battle, reactor, is_within_melee)
        return DecisionOutcome(kind=DecisionKind.HIT_REACTION, value=reaction)

    def notify_event(self, event: GameEvent, battle: Optional["BattleState"] = None) -> None:
        """Hand an event to the presentation layer and hold until its animation ends."""
        self._ensure_idle("notify_event")
        self._battle = battle
        self._transition(OrchestratorState.PROCESSING_EVENT)
        self.presenter.handle_game_event(event)

    # --- resolution ---------------------------------------------------------

    def tick(self, dt: float) -> None:
        """
        Advance one frame.

        A choice returned by the presenter resolves the pending decision;
        while an event is playing, the orchestrator returns to idle on the
        first tick with no ongoing animation.
        """
        choice = self.presenter.update(self._battle, dt)
        if choice is not None:
            self.submit(choice)
            return

        if self._state == OrchestratorState.PROCESSING_EVENT and not self.presenter.has_ongoing_animation():
            self._outcome = DecisionOutcome(kind=DecisionKind.EVENT)
            self._battle = None
            self._transition(OrchestratorState.IDLE)

    def submit(self, outcome: DecisionOutcome) -> None:
        """
        Resolve the pending decision with the player's choice.

        Raises:
            OrchestrationError: if nothing is pending or `outcome` answers a
                different kind of question
        """
        if self._pending is None:
            error = OrchestrationError(f"Got {outcome.kind.value} outcome but no decision is pending")
            logger.error(str(error))
            raise error
        if outcome.kind != self._pending.kind:
            error = OrchestrationError(
                f"Expected {self._pending.kind.value} outcome but got {outcome.kind.value}"
            )
            logger.error(str(error))
            raise error

        telemetry.log_decision(self._pending.actor_id, outcome.kind.value, outcome.value, source="player")
        self.presenter.set_idle()
        self._pending = None
        self._battle = None
        self._outcome = outcome
        self._transition(OrchestratorState.IDLE)

    def take_outcome(self) -> Optional[DecisionOutcome]:
        """Collect the result of the last suspended request (once)."""
        outcome = self._outcome
        self._outcome = None
        return outcome

    def reset(self) -> None:
        """Drop any pending question; used when the encounter ends."""
        if self._pending is not None:
            self.presenter.set_idle()
        self._pending = None
        self._battle = None
        self._outcome = None
        self._transition(OrchestratorState.IDLE)

    # --- internals ----------------------------------------------------------

    def _await(self, battle: "BattleState", decision: PendingDecision) -> None:
        self._battle = battle
        self._pending = decision
        self._transition(_AWAITING_STATE[decision.kind])
        self.presenter.prompt(decision)

    def _ensure_idle(self, context: str) -> None:
        if self._state != OrchestratorState.IDLE:
            error = OrchestrationError(f"{context} while {self._state.value}")
            logger.error(str(error))
            raise error
        if self._outcome is not None:
            error = OrchestrationError(f"{context} before the previous outcome was taken")
            logger.error(str(error))
            raise error

    def _transition(self, new_state: OrchestratorState) -> None:
        if new_state == self._state:
            return
        logger.debug(f"Orchestrator: {self._state.value} -> {new_state.value}")
        telemetry.log_transition(self._state.value, new_state.value)
        self._state = new_state
