from .battle_orchestrator import (
    DecisionKind,
    DecisionOutcome,
    GameEvent,
    OrchestratorState,
    PendingDecision,
    Presenter,
    TurnOrchestrator,
)

__all__ = [
    "DecisionKind",
    "DecisionOutcome",
    "GameEvent",
    "OrchestratorState",
    "PendingDecision",
    "Presenter",
    "TurnOrchestrator",
]
