# systems/conditions.py

from dataclasses import dataclass
from typing import List


# Well-known condition names
BLEEDING = "bleeding"
HORRIFIED = "horrified"
DAZED = "dazed"
RAGING = "raging"


@dataclass
class Condition:
    """
    A condition (buff or debuff) on a battle actor.

    stacks:
        Conditions of the same name merge by adding stacks.
    duration:
        Number of the affected actor's turns remaining. 0 means it lasts
        until removed explicitly.
    """
    name: str
    stacks: int = 1
    duration: int = 0


def add_condition(conditions: List[Condition], condition: Condition) -> None:
    """Apply a condition, merging stacks into an existing one of the same name."""
    for c in conditions:
        if c.name == condition.name:
            c.stacks += condition.stacks
            c.duration = max(c.duration, condition.duration)
            return
    conditions.append(condition)


def tick_conditions(conditions: List[Condition]) -> None:
    """
    Advance timed conditions by one turn of the affected actor and drop
    the expired ones. Untimed conditions are left alone.
    """
    remaining: List[Condition] = []
    for c in conditions:
        if c.duration > 0:
            c.duration -= 1
            if c.duration == 0:
                continue
        remaining.append(c)
    conditions[:] = remaining


def has_condition(conditions: List[Condition], name: str) -> bool:
    return any(c.name == name for c in conditions)


def get_stacks(conditions: List[Condition], name: str) -> int:
    return sum(c.stacks for c in conditions if c.name == name)


def is_bleeding(conditions: List[Condition]) -> bool:
    return has_condition(conditions, BLEEDING)
