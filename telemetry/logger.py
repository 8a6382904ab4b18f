from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field, is_dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional


def _now_iso() -> str:
    # ISO-ish without importing datetime (fast + good enough for logs)
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.localtime())


def describe(value: Any) -> Any:
    """Turn actions/reactions into something json can write."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if is_dataclass(value) and not isinstance(value, type):
        return {"type": type(value).__name__, **asdict(value)}
    return repr(value)


@dataclass
class TelemetryLogger:
    """
    Append-only JSONL log of battle decisions and orchestrator transitions.

    Rows are also kept in memory (`recent`, bounded) so tests and debug
    overlays can inspect them without a file.
    """
    path: Optional[Path] = None
    enabled: bool = True
    flush_each_write: bool = False
    keep_recent: int = 200
    recent: List[Dict[str, Any]] = field(default_factory=list)
    _started_at: float = field(default_factory=time.time)

    def init(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Touch file (don't overwrite)
        self.path.touch(exist_ok=True)
        self.log("telemetry_init", file=str(self.path))

    def log(self, event: str, **fields: Any) -> None:
        if not self.enabled:
            return

        row: Dict[str, Any] = {
            "t": time.time(),
            "ts": _now_iso(),
            "event": event,
            **{k: describe(v) for k, v in fields.items()},
        }

        self.recent.append(row)
        if len(self.recent) > self.keep_recent:
            del self.recent[: len(self.recent) - self.keep_recent]

        if self.path is None:
            return

        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(row, ensure_ascii=False, default=repr) + "\n")
                if self.flush_each_write:
                    f.flush()
        except OSError:
            # Telemetry must never break the battle.
            return

    def log_decision(self, actor_id: int, kind: str, outcome: Any, source: str) -> None:
        self.log("decision", actor=actor_id, kind=kind, outcome=outcome, source=source)

    def log_transition(self, old_state: str, new_state: str) -> None:
        self.log("orchestrator_transition", old=old_state, new=new_state)


# global singleton (easy import everywhere)
telemetry = TelemetryLogger()
