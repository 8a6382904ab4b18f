"""
Headless presentation layer.

Stands in for the graphical UI when battles run without a window: events
"animate" for a fixed time, and player choices are fed in from a queue.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, TYPE_CHECKING

from engine.error_handler import logger
from engine.managers.battle_orchestrator import DecisionOutcome, GameEvent, PendingDecision

if TYPE_CHECKING:
    from engine.battle.state import BattleState


class HeadlessPresenter:
    """
    Presenter without a screen.

    - prompt(): remembers the question; the next queued choice answers it
    - handle_game_event(): starts an animation lasting `animation_duration`
    """

    def __init__(self, animation_duration: float = 0.0) -> None:
        self.animation_duration = animation_duration
        self.prompts: List[PendingDecision] = []
        self.events: List[GameEvent] = []
        self.current_prompt: Optional[PendingDecision] = None
        self._choices: Deque[DecisionOutcome] = deque()
        self._animation_remaining = 0.0
        self._animating = False

    def queue_choice(self, outcome: DecisionOutcome) -> None:
        """Queue what the "player" answers to the next prompt."""
        self._choices.append(outcome)

    def prompt(self, decision: PendingDecision) -> None:
        self.prompts.append(decision)
        self.current_prompt = decision

    def set_idle(self) -> None:
        self.current_prompt = None

    def handle_game_event(self, event: GameEvent) -> None:
        logger.info(f"Event: {event.name} actor={event.actor} target={event.target} {event.details}")
        self.events.append(event)
        self._animation_remaining = self.animation_duration
        self._animating = True

    def update(self, state: Optional["BattleState"], dt: float) -> Optional[DecisionOutcome]:
        if self._animating:
            self._animation_remaining -= dt
            if self._animation_remaining <= 0:
                self._animating = False

        if self.current_prompt is not None and self._choices:
            return self._choices.popleft()
        return None

    def has_ongoing_animation(self) -> bool:
        return self._animating
