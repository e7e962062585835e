"""Pure rules for moving an ability from one level to the next.

Nothing here touches a point balance; the ledger debits whatever cost a
successful :func:`advance` reports.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from progression.components.ability_definition import AbilityDefinition
from progression.components.ability_state import AbilityState


class LearnFailure(Enum):
    UNKNOWN_ABILITY = "unknown_ability"
    INSUFFICIENT_POINTS = "insufficient_points"
    MAX_LEVEL_REACHED = "max_level_reached"
    PREREQUISITES_NOT_MET = "prerequisites_not_met"
    SPECIALIZATION_CONFLICT = "specialization_conflict"


@dataclass(frozen=True, slots=True)
class LearnResult:
    """Outcome of a learn/upgrade attempt.

    ``cost`` is the exact number of points charged (0 on failure) and
    ``level`` the ability's level after the attempt.
    """

    ability_id: str
    ok: bool
    reason: LearnFailure | None = None
    cost: int = 0
    level: int = 0

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, ability_id: str, *, cost: int, level: int) -> "LearnResult":
        return cls(ability_id=ability_id, ok=True, cost=cost, level=level)

    @classmethod
    def failure(cls, ability_id: str, reason: LearnFailure, *, level: int = 0) -> "LearnResult":
        return cls(ability_id=ability_id, ok=False, reason=reason, level=level)


def prerequisites_met(definition: AbilityDefinition, learned: Mapping[str, AbilityState]) -> bool:
    for prereq in definition.prerequisites:
        state = learned.get(prereq.ability_id)
        if state is None or state.level < prereq.min_level:
            return False
    return True


def missing_prerequisites(definition: AbilityDefinition, learned: Mapping[str, AbilityState]) -> tuple:
    """Prerequisites that ``learned`` does not yet satisfy, in declaration order."""
    missing = []
    for prereq in definition.prerequisites:
        state = learned.get(prereq.ability_id)
        if state is None or state.level < prereq.min_level:
            missing.append(prereq)
    return tuple(missing)


def check_advance(
    definition: AbilityDefinition,
    state: AbilityState,
    available_points: int,
    learned: Mapping[str, AbilityState],
) -> LearnResult:
    """Report whether ``state`` may advance one level, without changing it."""

    if state.level >= definition.max_level:
        return LearnResult.failure(definition.id, LearnFailure.MAX_LEVEL_REACHED, level=state.level)
    cost = definition.level_costs[state.level]
    if available_points < cost:
        return LearnResult.failure(definition.id, LearnFailure.INSUFFICIENT_POINTS, level=state.level)
    # Prerequisites gate the first learn only; later ranks are never re-checked.
    if state.level == 0 and not prerequisites_met(definition, learned):
        return LearnResult.failure(definition.id, LearnFailure.PREREQUISITES_NOT_MET, level=state.level)
    return LearnResult.success(definition.id, cost=cost, level=state.level + 1)


def can_advance(
    definition: AbilityDefinition,
    state: AbilityState,
    available_points: int,
    learned: Mapping[str, AbilityState],
) -> bool:
    return check_advance(definition, state, available_points, learned).ok


def advance(
    definition: AbilityDefinition,
    state: AbilityState,
    available_points: int,
    learned: Mapping[str, AbilityState],
) -> LearnResult:
    """Raise ``state`` by one level when allowed and report the cost charged."""

    result = check_advance(definition, state, available_points, learned)
    if result.ok:
        state.level += 1
    return result
