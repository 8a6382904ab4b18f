"""
Frame scheduler.

Drives the turn orchestrator one frame at a time off a pygame clock. The
orchestrator only ever waits on two things (a player choice, an animation
finishing) and both are re-checked once per frame here.
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import pygame

from engine.config import get_config
from engine.error_handler import logger

if TYPE_CHECKING:
    from engine.managers.battle_orchestrator import DecisionOutcome, TurnOrchestrator


class FrameScheduler:
    """Hands out frame times and pumps suspended orchestrator waits."""

    def __init__(self, fps: Optional[int] = None) -> None:
        # fps=0 runs frames back to back (headless drivers, tests)
        self.fps = get_config().fps if fps is None else fps
        self.clock = pygame.time.Clock()
        self.frame_count = 0

    def next_frame(self) -> float:
        """Wait for the next frame and return the elapsed time in seconds."""
        self.frame_count += 1
        return self.clock.tick(self.fps) / 1000.0

    def run_until_idle(
        self,
        orchestrator: "TurnOrchestrator",
        max_frames: Optional[int] = None,
    ) -> Optional["DecisionOutcome"]:
        """
        Tick `orchestrator` until it stops waiting, then collect its outcome.

        With `max_frames`, gives up after that many frames and returns None,
        leaving the orchestrator suspended.
        """
        frames = 0
        while orchestrator.is_suspended:
            if max_frames is not None and frames >= max_frames:
                logger.debug(f"Orchestrator still {orchestrator.state.value} after {frames} frames")
                return None
            orchestrator.tick(self.next_frame())
            frames += 1
        return orchestrator.take_outcome()
